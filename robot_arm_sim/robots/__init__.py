"""
Robot description and state for simulation.

Provides the immutable 6-DOF arm model (joint limits, DH table, workspace,
home pose), the mutable robot state owned by the motion queue, and a
registry of named arm models.
"""
