from typing import Dict, List, Optional

# Curated locations covering the main climate regimes
PRESET_LOCATIONS: List[Dict] = [
    {"id": "phoenix", "name": "Phoenix", "country": "USA", "lat": 33.4484, "lon": -112.0740,
     "climate": "Hot desert, extreme summer heat"},
    {"id": "delhi", "name": "New Delhi", "country": "India", "lat": 28.6139, "lon": 77.2090,
     "climate": "Monsoon-influenced humid subtropical"},
    {"id": "paris", "name": "Paris", "country": "France", "lat": 48.8566, "lon": 2.3522,
     "climate": "Temperate oceanic"},
    {"id": "hanoi", "name": "Hanoi", "country": "Vietnam", "lat": 21.0285, "lon": 105.8542,
     "climate": "Humid subtropical with monsoon rains"},
    {"id": "sydney", "name": "Sydney", "country": "Australia", "lat": -33.8688, "lon": 151.2093,
     "climate": "Coastal humid subtropical"},
    {"id": "manaus", "name": "Manaus", "country": "Brazil", "lat": -3.1190, "lon": -60.0217,
     "climate": "Tropical rainforest"},
]


def get_preset(preset_id: str) -> Optional[Dict]:
    for p in PRESET_LOCATIONS:
        if p["id"] == preset_id.lower():
            return p
    return None
