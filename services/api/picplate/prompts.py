import re
from typing import Iterable, Optional, Sequence

_MARKDOWN_CHARS = re.compile(r"[#>*`\-]")


def label_texts(labels: Iterable) -> list[str]:
    out = []
    for label in labels:
        if isinstance(label, str):
            out.append(label)
        elif isinstance(label, dict) and label.get("description"):
            out.append(str(label["description"]))
        else:
            out.append(str(label))
    return out


def recipe_prompt(labels: Sequence[str], emotions: Optional[Sequence[str]] = None, colors: Optional[Sequence] = None) -> str:
    prompt = "You are a creative home cook. Based on the following context:\n- Labels: " + ", ".join(labels)
    if emotions:
        prompt += "\n- Emotions: " + ", ".join(emotions)
    if colors:
        prompt += "\n- Colors: " + ", ".join(f"rgb({c.red:g},{c.green:g},{c.blue:g})" for c in colors)
    prompt += (
        "\nSuggest a main course meal. The response should be structured in the style of a recipe. "
        "Start with a creative title for the meal. Then give a brief description of the meal and how it "
        "relates to the provided context. Then give the ingredients and steps for making the main dish, "
        "finally give brief suggestions for an appetizer, side, and dessert.  Use markdown."
    )
    return prompt


def restaurant_prompt(dish_name: str, user_location: str) -> str:
    dish = _MARKDOWN_CHARS.sub("", dish_name)[:400]
    return (
        f"Suggest 3 restaurants that are in the area of this zip code: {user_location}. "
        f'They should serve food such as the food in this recipe: "{dish}".\n'
        "Each suggestion should be:\n- **Restaurant Name**\n- One sentence summary why it's a match\n"
        "- Include website link if available.\nUse markdown."
    )


def dish_image_prompt(recipe_text: str) -> str:
    return (
        f"Create a beautiful, appetizing food photograph of a dish based on this recipe: {recipe_text[:500]}. "
        "Make it look professional, well-lit, and mouth-watering."
    )
