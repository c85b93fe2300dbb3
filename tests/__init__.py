"""
Test suite for the Hospital Scheduling System.

Contains unit tests for the scheduling engine and integration tests for the API.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
