"""
Plinko Package
==============

Simulation and outcome-selection engine for a Plinko-style drop game.

- core: layout, collision, stepping, outcome selection and the game session
- evaluation: Monte Carlo payout evaluation harness

Board, ball, slot and session parameters live in game_config.yaml.
"""
