"""Keyword rules that turn taxonomy term names into display text.

Products are bucketed into categories (first matching rule wins, then the
vegetable vocabulary, then "Other Products"). Features are filtered down to
payment methods, and certification terms to a known allow-list.
"""

import html

# Organisational taxonomy nodes, not sellable products.
SKIP_MARKERS = (
    "services",
    "uncategorized",
    "all products",
    "products & services",
    "farms & ranches",
)

# Order matters: a term is assigned to the first category with a hit.
# Names are lowercased and padded with a space on each side before matching,
# so a leading/trailing space in a keyword acts as a word boundary.
CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Eggs", ("egg ", "eggs")),
    ("Dairy", ("dairy", "milk", "cheese", "yogurt", "butter ", "cream", "kefir")),
    ("Meat & Poultry", (
        "beef", "pork", "lamb", "chicken", "poultry", "turkey", "meat", " goat",
        "duck", "sausage", "bacon", " ham ", "bison", "rabbit",
    )),
    ("Seafood", (
        "fish", "salmon", "seafood", "shellfish", "oyster", " clam", "crab",
        "shrimp", "tuna", "halibut", "mussel", " cod ", "scallop",
    )),
    ("Fruits & Berries", (
        "fruit", "berry", "berries", "apple", " pear", "cherr", "peach", " plum",
        "grape", "melon", "citrus", "apricot",
    )),
    ("Grains & Baked Goods", (
        "grain", "flour", "bread", "wheat", "baked", "bakery", "pastr", " oats",
        " rice ", "cereal",
    )),
    ("Honey & Preserves", ("honey", " jam", "jelly", "preserve", "syrup", "maple")),
    ("Flowers & Plants", (
        " flower", "bouquet", "nursery", "plant start", "seedling", "bulb", "succulent",
    )),
    ("Beverages", (
        "beverage", "cider", "wine", "beer", "coffee", " tea ", " teas ", "juice", "kombucha",
        "spirits",
    )),
    ("Prepared Foods", (
        "prepared", "sauce", "salsa", "pickle", "ferment", "kimchi", "soup",
        "sauerkraut",
    )),
)

VEGETABLES_LABEL = "Vegetables & Herbs"
OTHER_LABEL = "Other Products"

VEGETABLE_VOCABULARY = (
    "vegetable", "veggie", "greens", "lettuce", "salad", "kale", "spinach",
    "chard", "arugula", "cabbage", "broccoli", "cauliflower", "brussels",
    "carrot", "beet", "radish", "turnip", "parsnip", "rutabaga", "kohlrabi",
    "potato", "yam", "onion", "garlic", "leek", "shallot", "scallion",
    "tomato", "pepper", "chile", "chili", "cucumber", "zucchini", "squash",
    "pumpkin", "gourd", "eggplant", "bean", "pea", "corn", "asparagus",
    "celery", "fennel", "artichoke", "okra", "mushroom", "sprout",
    "microgreen", "bok choy", "collard", "mustard green", "rhubarb",
    "herb", "basil", "parsley", "cilantro", "dill", "mint", "rosemary",
    "thyme", "sage", "oregano", "chive", "tarragon", "lemongrass", "ginger",
    "horseradish", "tomatillo", "sorrel", "watercress",
)

PAYMENT_KEYWORDS = ("cash", "check", "card", "venmo", "snap", "ebt", "wic")

CERTIFICATION_KEYWORDS = (
    "organic",
    "certified",
    "salmon-safe",
    "salmon safe",
    "food alliance",
    "animal welfare",
    "naturally grown",
    "non-gmo",
    "biodynamic",
    "fair trade",
    "regenerative",
    "grass-fed",
    "grass fed",
    "pasture",
    "usda",
    "kosher",
    "halal",
)

CATEGORY_ORDER = tuple(label for label, _ in CATEGORY_RULES) + (VEGETABLES_LABEL, OTHER_LABEL)


def _clean(term_names) -> list[str]:
    return [name.strip() for name in term_names or [] if name and name.strip()]


def is_skipped(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in SKIP_MARKERS)


def categorize(name: str) -> str:
    """Return the category label for a single product term name."""
    padded = f" {name.lower()} "
    for label, keywords in CATEGORY_RULES:
        if any(keyword in padded for keyword in keywords):
            return label
    if any(word in padded for word in VEGETABLE_VOCABULARY):
        return VEGETABLES_LABEL
    return OTHER_LABEL


def bucket_products(term_names) -> dict[str, list[str]]:
    """
    Group product term names by category.

    Skipped terms and terms named after their own category are dropped.
    Keys follow CATEGORY_ORDER; empty categories are not included.
    """
    buckets: dict[str, list[str]] = {label: [] for label in CATEGORY_ORDER}
    for name in _clean(term_names):
        if is_skipped(name):
            continue
        label = categorize(name)
        if name.lower() == label.lower():
            continue
        buckets[label].append(name)
    return {label: names for label, names in buckets.items() if names}


def classify_products(term_names) -> str:
    """
    Format product terms as one bold "Category:" line per category.

    >>> classify_products(["Organic Eggs", "Fresh Basil", "Farm Services"])
    '<strong>Eggs:</strong> Organic Eggs<br><strong>Vegetables &amp; Herbs:</strong> Fresh Basil'
    """
    lines = []
    for label, names in bucket_products(term_names).items():
        items = ", ".join(html.escape(name) for name in names)
        lines.append(f"<strong>{html.escape(label)}:</strong> {items}")
    return "<br>".join(lines)


def filter_payment_methods(term_names) -> str:
    """Keep only feature terms that name a payment method."""
    kept = [
        name for name in _clean(term_names)
        if any(keyword in name.lower() for keyword in PAYMENT_KEYWORDS)
    ]
    return ", ".join(kept)


def filter_certifications(term_names) -> str:
    """Keep only value-indicator terms on the certification allow-list."""
    kept = [
        name for name in _clean(term_names)
        if any(keyword in name.lower() for keyword in CERTIFICATION_KEYWORDS)
    ]
    return ", ".join(kept)


def join_terms(term_names) -> str:
    return ", ".join(_clean(term_names))
