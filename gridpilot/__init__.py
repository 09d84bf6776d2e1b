"""
GridPilot X: Weather Acquisition Edition

Feeds the Agra microgrid dispatch simulator with a canonical 24-point hourly
weather observation (temperature, humidity, cloud cover, sunrise/sunset).

The acquisition chain ALWAYS returns usable data:
- Live providers are tried in priority order (keyed first, keyless next)
- Every provider payload is validated before it is trusted
- The Offline Synthesis Model is the terminal, never-failing fallback

Architecture:
    providers/     - Live data adapters:
                     * weatherapi.py - WeatherAPI.com (keyed, paid)
                     * open_meteo.py - Open-Meteo (keyless)
    chain.py       - Provider chain orchestrator (fail-soft fold)
    synthesis.py   - Offline diurnal weather generator
    climate.py     - 10-day Agra climate profile table
    normalize.py   - 24-hour array normalizer
    vision.py      - Weather graph digitization (Claude vision)
    narrative.py   - Simulation audit narrative (Claude)
    resilience.py  - Error kinds, deadlines and retry logic
    config.py      - Environment-driven settings

Entry Points:
    main.py        - Fetch today's observation from the command line
"""

__version__ = "1.0.0"
__author__ = "GridPilot X"
