"""auth/ -- Credential verification and token sessions for TokenGate.

Layer rule: auth/ imports stdlib, third-party libraries, core/ and cache/.
cache/ and core/ never import from auth/.
"""
