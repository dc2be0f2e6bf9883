"""
Core business logic for video assets.

This module is framework-agnostic - it doesn't import FastAPI, boto3,
or any infrastructure concerns. Signing is reached through a protocol,
so the asset logic can be tested with a fake signer.
"""
