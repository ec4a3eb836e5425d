"""Contract layer for the multi-backend copilot.

Defines how AI providers are represented by capability, how prompt messages,
chat history and session state are validated, and how input text is
measured against a model's token budget.
"""

__version__ = "0.1.0"
