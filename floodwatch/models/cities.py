"""
監視対象都市データモデル

気象APIに座標で問い合わせる主要都市の一覧
"""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class CityCoordinates:
    """都市の座標"""
    name: str
    lat: float
    lon: float


CITY_COORDINATES: Dict[str, CityCoordinates] = {
    city.name: city
    for city in (
        CityCoordinates("Mumbai", 19.0760, 72.8777),
        CityCoordinates("Delhi", 28.7041, 77.1025),
        CityCoordinates("Bangalore", 12.9716, 77.5946),
        CityCoordinates("Hyderabad", 17.3850, 78.4867),
        CityCoordinates("Chennai", 13.0827, 80.2707),
        CityCoordinates("Kolkata", 22.5726, 88.3639),
        CityCoordinates("Pune", 18.5204, 73.8567),
        CityCoordinates("Ahmedabad", 23.0225, 72.5714),
        CityCoordinates("Surat", 21.1702, 72.8311),
        CityCoordinates("Jaipur", 26.9124, 75.7873),
        CityCoordinates("Lucknow", 26.8467, 80.9462),
        CityCoordinates("Kanpur", 26.4499, 80.3319),
        CityCoordinates("Nagpur", 21.1458, 79.0882),
        CityCoordinates("Visakhapatnam", 17.6868, 83.2185),
        CityCoordinates("Indore", 22.7196, 75.8577),
        CityCoordinates("Thane", 19.2183, 72.9781),
        CityCoordinates("Bhopal", 23.2599, 77.4126),
        CityCoordinates("Patna", 25.5941, 85.1376),
        CityCoordinates("Vadodara", 22.3072, 73.1812),
        CityCoordinates("Ghaziabad", 28.6692, 77.4538),
        CityCoordinates("Ludhiana", 30.9010, 75.8573),
        CityCoordinates("Coimbatore", 11.0168, 76.9558),
        CityCoordinates("Agra", 27.1767, 78.0081),
        CityCoordinates("Madurai", 9.9252, 78.1198),
    )
}


def find_city(name: str) -> Optional[CityCoordinates]:
    """都市名から座標を検索（大文字小文字は区別しない）"""
    if not name:
        return None
    city = CITY_COORDINATES.get(name)
    if city:
        return city
    search_name = name.strip().lower()
    for city in CITY_COORDINATES.values():
        if city.name.lower() == search_name:
            return city
    return None
