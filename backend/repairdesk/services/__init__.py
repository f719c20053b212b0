# Overview: Service layer. Every public operation takes an explicit TenantContext
# and returns a Result (see results.py).
