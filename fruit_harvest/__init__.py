"""
Fruit Harvest
=============

Timed arcade mini-game: harvest as many fruits as possible in three minutes,
each fruit kind needing its own gesture.

- harvest_core: session state machine, fruit simulation, scoring
- evaluation: headless autoplay sessions and score summaries

All tunable parameters are in game_config.yaml.
"""
