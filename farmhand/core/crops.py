from typing import Dict, List, Optional

CROPS: List[Dict[str, str]] = [
    {"id": "maize", "name": "Maize", "emoji": "\U0001F33D"},
    {"id": "cassava", "name": "Cassava", "emoji": "\U0001F954"},
    {"id": "yam", "name": "Yam", "emoji": "\U0001F360"},
    {"id": "rice", "name": "Rice", "emoji": "\U0001F35A"},
    {"id": "sorghum", "name": "Sorghum", "emoji": "\U0001F33E"},
    {"id": "tomato", "name": "Tomato", "emoji": "\U0001F345"},
    {"id": "onion", "name": "Onion", "emoji": "\U0001F9C5"},
    {"id": "pepper", "name": "Pepper", "emoji": "\U0001F336\uFE0F"},
    {"id": "groundnut", "name": "Groundnut", "emoji": "\U0001F95C"},
    {"id": "cowpea", "name": "Cowpea", "emoji": "\U0001FAD8"},
    {"id": "plantain", "name": "Plantain", "emoji": "\U0001F34C"},
    {"id": "okra", "name": "Okra", "emoji": "\U0001F33F"},
    {"id": "millet", "name": "Millet", "emoji": "\U0001F33E"},
    {"id": "cotton", "name": "Cotton", "emoji": "\U0001F331"},
    {"id": "sugarcane", "name": "Sugarcane", "emoji": "\U0001F38B"},
    {"id": "cocoa", "name": "Cocoa", "emoji": "\U0001F36B"},
]

def get_crop(crop_id: str) -> Optional[Dict[str, str]]:
    return next((c for c in CROPS if c["id"] == crop_id), None)
