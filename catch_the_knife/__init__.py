"""
Catch the Knife Package
=======================

This package contains the gameplay core for Catch the Knife: a single knife
falls towards a catch zone and must be tapped while only its handle is inside
the zone.

- Difficulty ramp (fall speed, catch zone shrink, daily tuning)
- Catch evaluation (handle vs blade hit boxes, perfect window)
- Combo and fever tracking
- Session state machine (miss, revive, restart, pause, slow motion)

All tunable parameters are in game_config.yaml.
"""
