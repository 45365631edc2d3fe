"""Test suite for numsync."""
