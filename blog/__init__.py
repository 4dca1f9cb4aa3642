"""blog/ -- Blog post persistence and validation.

Layer rule: blog/ imports only stdlib, third-party libraries, and core/.
Author usernames are resolved by api/ through auth.store, never from here.
"""
