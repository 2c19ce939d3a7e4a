"""Domain enums, input types and money rules."""
