"""
cephsource - Ceph bucket notifications to CloudEvents

Receives S3-compatible bucket notifications over HTTP, converts each
record into a CloudEvents envelope and forwards it to a sink.
"""

__version__ = "0.1.0"
