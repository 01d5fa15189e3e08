"""Evolutionary loop, breeding and stopping conditions."""
