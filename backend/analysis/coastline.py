"""
Distance to the nearest coastline.

A curated set of coastal reference points (major coastlines, ports and island
nations) stands in for real coastline geometry; accuracy is roughly ±20-50 km,
enough to decide whether ocean data is worth fetching at all.
"""
import math
from typing import NamedTuple, Tuple

EARTH_RADIUS_KM = 6371.0


class CoastPoint(NamedTuple):
    lat: float
    lon: float
    name: str


# (lat, lon, name)
COASTAL_POINTS: Tuple[CoastPoint, ...] = tuple(CoastPoint(*p) for p in [
    # Pacific - Asia
    (35.6762, 139.6503, "Tokyo, Japan"),
    (34.6937, 135.5023, "Osaka, Japan"),
    (43.0618, 141.3545, "Sapporo coast, Japan"),
    (37.5665, 126.9780, "Seoul coast, South Korea"),
    (35.1796, 129.0756, "Busan, South Korea"),
    (31.2304, 121.4737, "Shanghai, China"),
    (39.0842, 117.2009, "Tianjin, China"),
    (22.3193, 114.1694, "Hong Kong"),
    (25.0330, 121.5654, "Taipei, Taiwan"),
    (14.5995, 120.9842, "Manila, Philippines"),
    (1.3521, 103.8198, "Singapore"),
    (-6.2088, 106.8456, "Jakarta, Indonesia"),
    (13.7563, 100.5018, "Bangkok vicinity"),
    (10.8231, 106.6297, "Ho Chi Minh, Vietnam"),
    (21.0285, 105.8542, "Hanoi coast"),
    (43.1155, 131.8855, "Vladivostok, Russia"),

    # Pacific - Americas
    (37.7749, -122.4194, "San Francisco, USA"),
    (34.0522, -118.2437, "Los Angeles, USA"),
    (32.7157, -117.1611, "San Diego, USA"),
    (47.6062, -122.3321, "Seattle, USA"),
    (49.2827, -123.1207, "Vancouver, Canada"),
    (61.2181, -149.9003, "Anchorage, USA"),
    (19.4326, -99.1332, "Mexico City coast"),
    (16.8531, -99.8237, "Acapulco, Mexico"),
    (8.9824, -79.5199, "Panama City, Panama"),
    (-2.1894, -79.8891, "Guayaquil, Ecuador"),
    (-33.4489, -70.6693, "Santiago coast, Chile"),
    (-12.0464, -77.0428, "Lima, Peru"),

    # Pacific - Oceania
    (-33.8688, 151.2093, "Sydney, Australia"),
    (-37.8136, 144.9631, "Melbourne, Australia"),
    (-27.4698, 153.0251, "Brisbane, Australia"),
    (-31.9505, 115.8605, "Perth, Australia"),
    (-12.4634, 130.8456, "Darwin, Australia"),
    (-36.8485, 174.7633, "Auckland, New Zealand"),
    (-41.2865, 174.7762, "Wellington, New Zealand"),

    # Atlantic - Americas
    (40.7128, -74.0060, "New York, USA"),
    (25.7617, -80.1918, "Miami, USA"),
    (29.7604, -95.3698, "Houston coast, USA"),
    (29.9511, -90.0715, "New Orleans, USA"),
    (42.3601, -71.0589, "Boston, USA"),
    (44.6488, -63.5752, "Halifax, Canada"),
    (45.5017, -73.5673, "Montreal coast"),
    (-22.9068, -43.1729, "Rio de Janeiro, Brazil"),
    (-23.5505, -46.6333, "São Paulo coast, Brazil"),
    (-8.0476, -34.8770, "Recife, Brazil"),
    (-34.6037, -58.3816, "Buenos Aires, Argentina"),

    # Atlantic - Europe
    (51.5074, -0.1278, "London coast, UK"),
    (55.9533, -3.1883, "Edinburgh, UK"),
    (53.3498, -6.2603, "Dublin, Ireland"),
    (48.8566, 2.3522, "Paris coast"),
    (52.5200, 13.4050, "Berlin coast"),
    (53.5511, 9.9937, "Hamburg, Germany"),
    (52.3676, 4.9041, "Amsterdam, Netherlands"),
    (41.3851, 2.1734, "Barcelona, Spain"),
    (38.7223, -9.1393, "Lisbon, Portugal"),
    (40.4168, -3.7038, "Madrid coast"),
    (43.2965, 5.3698, "Marseille, France"),
    (59.9139, 10.7522, "Oslo, Norway"),
    (59.3293, 18.0686, "Stockholm, Sweden"),
    (60.1699, 24.9384, "Helsinki, Finland"),
    (55.6761, 12.5683, "Copenhagen, Denmark"),

    # Atlantic - Africa
    (-33.9249, 18.4241, "Cape Town, South Africa"),
    (6.5244, 3.3792, "Lagos, Nigeria"),
    (5.6037, -0.1870, "Accra, Ghana"),
    (14.7167, -17.4677, "Dakar, Senegal"),
    (-4.0383, 39.6682, "Mombasa, Kenya"),
    (36.8065, 10.1815, "Tunis, Tunisia"),
    (33.5731, -7.5898, "Casablanca, Morocco"),

    # Indian Ocean
    (19.0760, 72.8777, "Mumbai, India"),
    (13.0827, 80.2707, "Chennai, India"),
    (22.5726, 88.3639, "Kolkata coast, India"),
    (6.9271, 79.8612, "Colombo, Sri Lanka"),
    (4.2105, 73.5393, "Malé, Maldives"),
    (24.8607, 67.0011, "Karachi, Pakistan"),
    (-29.8587, 31.0218, "Durban, South Africa"),
    (24.4539, 54.3773, "Abu Dhabi, UAE"),
    (25.2048, 55.2708, "Dubai, UAE"),
    (26.2285, 50.5860, "Manama, Bahrain"),

    # Mediterranean
    (41.9028, 12.4964, "Rome coast, Italy"),
    (40.8518, 14.2681, "Naples, Italy"),
    (37.9838, 23.7275, "Athens, Greece"),
    (41.0082, 28.9784, "Istanbul, Turkey"),
    (33.8886, 35.4955, "Beirut, Lebanon"),
    (31.2001, 29.9187, "Alexandria, Egypt"),
    (36.7213, 3.1728, "Algiers, Algeria"),

    # Caribbean
    (18.4655, -66.1057, "San Juan, Puerto Rico"),
    (23.1136, -82.3666, "Havana, Cuba"),
    (18.0179, -76.8099, "Kingston, Jamaica"),
    (10.4806, -66.9036, "Caracas coast, Venezuela"),

    # Arctic / North
    (64.1466, -21.9426, "Reykjavik, Iceland"),
    (69.6492, 18.9553, "Tromsø, Norway"),
    (55.7558, 37.6173, "Moscow coast"),

    # Pacific islands
    (21.3099, -157.8581, "Honolulu, Hawaii"),
    (13.4443, 144.7937, "Hagåtña, Guam"),
    (-17.7404, 177.4413, "Suva, Fiji"),
    (-13.8333, -171.7333, "Apia, Samoa"),

    # Red Sea & Persian Gulf
    (21.4858, 39.1925, "Jeddah, Saudi Arabia"),
    (29.3759, 47.9774, "Kuwait City, Kuwait"),
    (12.8654, 45.0126, "Aden, Yemen"),
])


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def nearest_coast(lat: float, lon: float,
                  points: Tuple[CoastPoint, ...] = COASTAL_POINTS) -> Tuple[float, CoastPoint]:
    """(distance_km, point) for the closest reference point. Ties keep the first."""
    best = points[0]
    best_km = math.inf
    for p in points:
        km = haversine_km(lat, lon, p.lat, p.lon)
        if km < best_km:
            best_km, best = km, p
    return best_km, best


def distance_km(lat: float, lon: float) -> float:
    return nearest_coast(lat, lon)[0]


def is_coastal(distance: float, max_km: float = 50.0) -> bool:
    return distance <= max_km


def coastal_zone(distance: float, strong_km: float = 30.0, max_km: float = 50.0) -> str:
    """'strong' | 'intermediate' | 'inland'"""
    if distance <= strong_km:
        return "strong"
    if distance <= max_km:
        return "intermediate"
    return "inland"
