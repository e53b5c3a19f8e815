"""
Feature modules for the Debate Arena backend.

- debates: The debate aggregate, phase orchestration, scoring and routes
- generation: Structured LLM calls behind IStructuredGenerator
- realtime: Observer channels and their subscription tokens

Modules communicate through interfaces, not concrete implementations.
"""
