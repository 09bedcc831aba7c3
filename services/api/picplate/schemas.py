from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, List, Optional

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class VisionRequest(CamelModel):
    image_url: Optional[str] = None
    access_token: Optional[str] = None

class Color(BaseModel):
    red: float = 0
    green: float = 0
    blue: float = 0

class RecipeRequest(CamelModel):
    labels: Optional[Any] = None  # list of strings or {description} objects
    emotions: Optional[List[str]] = None
    colors: Optional[List[Color]] = None
    use_emotions: bool = False
    use_colors: bool = False
    temperature: Optional[float] = None
    image_url: Optional[str] = None
    image_base64: Optional[str] = None
    processed_image: Optional[str] = None

class RestaurantRequest(CamelModel):
    dish_name: Optional[str] = None
    user_location: Optional[str] = None
    image_base64: Optional[str] = None
    processed_image: Optional[str] = None

class ImagesRequest(CamelModel):
    recipe_text: Optional[str] = None

class GeneratedImage(CamelModel):
    mime_type: str
    data: str

class PhotosRequest(CamelModel):
    access_token: Optional[str] = None

class ImageProxyRequest(CamelModel):
    image_url: Optional[str] = None
    access_token: Optional[str] = None

class LoginRequest(CamelModel):
    access_token: Optional[str] = None

class HistorySaveRequest(CamelModel):
    email: Optional[str] = None
    photo_url: Optional[str] = None
    photo_id: Optional[str] = None
    recipe_prompt: Optional[str] = None
    restaurant_prompt: Optional[str] = None
    image_data: Optional[str] = None

class HistoryGetRequest(CamelModel):
    email: Optional[str] = None

class HistoryOut(CamelModel):
    id: str
    photo_url: str
    photo_id: Optional[str] = None
    recipe_prompt: str
    restaurant_prompt: str
    timestamp: str
