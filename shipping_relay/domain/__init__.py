"""
Domain layer: plain immutable models shared by the validator, the gateway and the orchestrator.
"""
