"""
Core modules for Prompt Bench.

This package contains the conversation model, the usage ledger and its
pricing, and the submission controller that talks to the model boundary.
"""
