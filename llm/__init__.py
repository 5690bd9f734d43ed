"""
LLM integration for SMS transaction extraction.

This package contains:
- client: Ollama chat client and response assembly
- extract: Prompt -> chat -> parse -> validate
- prompts: Extraction prompt builder
"""
