"""Use-case orchestration: planning, ranking and learning."""
