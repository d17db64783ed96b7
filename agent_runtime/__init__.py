"""Turn processing and goal prioritization for persona-driven chat agents."""
