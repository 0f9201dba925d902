"""
App module for Tempr.

Wires the context, trigger and music logic into the prompt cycle and
provides the process entry point.
"""
