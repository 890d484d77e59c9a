"""Domain services: one module of functions per entity, plus shared helpers."""
