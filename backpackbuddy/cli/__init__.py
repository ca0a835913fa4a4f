"""Command-line tools for BackpackBuddy.

- ``python -m backpackbuddy.cli geo`` -- country / city basics
- ``python -m backpackbuddy.cli weather`` -- current weather + forecast
- ``python -m backpackbuddy.cli photo`` -- get or fetch a location photo
- ``python -m backpackbuddy.cli populate`` -- bulk-fetch photos from a YAML/JSON list
- ``python -m backpackbuddy.cli rate-limit`` -- Unsplash quota status
"""
