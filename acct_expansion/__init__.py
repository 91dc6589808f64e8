"""Account Expansion Lambda.

Resolves tokenized account numbers carried on EventBridge events back to
their original value through the remote detokenization (unprotect) service.

Modules:
    - **handler.py**: AWS Lambda entry point
    - **event.py**: EventBridge envelope model and account number extraction
    - **detokenization/**: request/response models and the HTTP client
    - **settings.py**: configuration read from the Lambda environment
    - **log_context.py**: level-gated, redacting front end to ``core_logging``
    - **formatters.py**: per-type formatting and redaction of log details
    - **exceptions.py**: failure taxonomy

Flow:

.. code-block:: text

    EventBridge -> handler -> extract_event -> detokenize -> log outcome

Dependencies:
    - sck-core-logging: structured logging
    - pydantic: event, settings and wire models
    - httpx: HTTP client

Usage:

.. code-block:: python

    from acct_expansion.handler import handler

    handler({"detail": {"accountNumber": "tok-4111"}}, context)
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
