"""auth/ -- Authentication, credential storage and account operations for eliteapp.

Layer rule: auth/ imports only stdlib, third-party libraries, core/ and
activity/. It does NOT import from api/. api/ imports from auth/, not the
other way around.
"""
