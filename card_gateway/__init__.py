"""
Card Gateway - Credit Card Application Lifecycle Service

A FastAPI-based microservice that takes credit card applications through
review, automatic decisioning and registration with the core banking system.
"""

__version__ = "0.1.0"
