"""Core domain package for beacon.

Core contains message validation, selection and experiment handling without
any configuration, storage or UI-specific code, keeping the decision logic
portable.
"""
