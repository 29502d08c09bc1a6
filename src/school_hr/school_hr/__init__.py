"""School HR calculation core.

Feature modules (leave, attendance, payroll) each keep models, repository
interfaces, services and a thin Flask controller. Storage is injected through
repository protocols backed by a key-value store.
"""
