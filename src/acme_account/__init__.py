"""ACME account provisioning.

Generates an account key, registers it with an `ACME`_ certificate
authority and stores the resulting credentials for certificate issuance
tooling.

.. _`ACME`: https://datatracker.ietf.org/doc/html/rfc8555

"""

# version number like 1.2.3a0, must have at least 2 parts, like 1.2
__version__ = '0.3.0.dev0'
