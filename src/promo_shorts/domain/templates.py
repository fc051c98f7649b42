"""
Script templates and product category keywords.

Both tables are ordered and evaluated first-match-wins. Keywords overlap
across categories, so the order is part of the behavior.
"""

from __future__ import annotations

from promo_shorts.domain.value_objects import Mood, ProductCategory

PRODUCT_PLACEHOLDER = "{product}"

CATEGORY_KEYWORDS: tuple[tuple[ProductCategory, tuple[str, ...]], ...] = (
    (ProductCategory.BEAUTY, ("serum", "cream", "skincare", "beauty", "glow", "face")),
    (ProductCategory.TECH, ("tech", "gadget", "phone", "laptop", "device")),
    (ProductCategory.FASHION, ("clothes", "dress", "shirt", "fashion", "style")),
    (ProductCategory.FOOD, ("food", "snack", "drink", "recipe", "meal")),
)

FALLBACK_MOOD = Mood.TRENDY

SCRIPT_TEMPLATES: dict[Mood, dict[ProductCategory, tuple[str, ...]]] = {
    Mood.FUNNY: {
        ProductCategory.BEAUTY: (
            "My skin said 'who dis new phone?'",
            "{product} literally broke my mirror",
            "I'm glowing like a lightbulb now",
            "My friends think I got surgery",
            "Plot twist it actually works besties",
            "The glow up is absolutely unreal",
            "I'm basically a walking highlighter",
            "My confidence said thank you queen",
            "Your skin deserves this magic potion",
            "Don't walk RUN to get this",
        ),
        ProductCategory.TECH: (
            "This gadget broke my brain cells",
            "{product} is from the year 3000",
            "My life just got a software update",
            "Why didn't anyone tell me sooner",
            "It's like having a personal robot",
            "My productivity went absolutely crazy",
            "Everyone's asking what my secret is",
            "This is not a drill people",
            "Your life needs this upgrade badly",
            "Trust me and thank me later",
        ),
        ProductCategory.FASHION: (
            "This outfit said pick me",
            "{product} is absolutely iconic",
            "I'm serving looks and confidence",
            "People can't stop staring honestly",
            "My style game just leveled up",
            "The compliments are getting ridiculous",
            "I feel like a main character",
            "This is my new personality",
            "You need this in your life",
            "Get it before everyone else does",
        ),
        ProductCategory.FOOD: (
            "This taste transported my soul",
            "{product} just changed my life",
            "I'm emotionally attached to this now",
            "My taste buds are having a party",
            "I bought ten more immediately",
            "This is my new obsession officially",
            "I can't eat anything else",
            "My friends steal this constantly",
            "You haven't lived until you try",
            "Order it right now seriously",
        ),
    },
    Mood.EXCITING: {
        ProductCategory.BEAUTY: (
            "{product} is absolutely life changing",
            "Results in just seven days guaranteed",
            "My skin transformation is completely insane",
            "The glow is totally unreal",
            "Everyone keeps asking my secret routine",
            "This revolutionized my entire skincare",
            "The before and after shocked everyone",
            "I cannot believe the dramatic difference",
            "Your skin will thank you forever",
            "Get yours now before complete sellout",
        ),
        ProductCategory.TECH: (
            "{product} is revolutionary technology",
            "This will change everything completely",
            "The performance is absolutely mind blowing",
            "I'm getting incredible results daily",
            "This solved all my problems",
            "The speed improvement is unreal",
            "Everyone needs this in their life",
            "This is the future right now",
            "Don't miss out on this game changer",
            "Order immediately while still available",
        ),
    },
    Mood.TRENDY: {
        ProductCategory.DEFAULT: (
            "POV you found the holy grail",
            "{product} hits different bestie",
            "This is giving main character energy",
            "The vibe check is absolutely unmatched",
            "Everyone's copying my aesthetic now",
            "My confidence just leveled up significantly",
            "This is not a want it's definitely need",
            "The compliments keep flowing in daily",
            "Trust the process and trust me",
            "Link in bio before it's gone",
        ),
    },
    Mood.LUXURIOUS: {
        ProductCategory.DEFAULT: (
            "{product} is pure luxury experience",
            "Quality that speaks for itself",
            "This is investment in yourself",
            "The craftsmanship is absolutely impeccable",
            "You deserve this level of excellence",
            "This elevates your entire lifestyle",
            "Premium quality meets perfect design",
            "This is what success looks like",
            "Treat yourself like royalty today",
            "Experience luxury that lasts lifetime",
        ),
    },
}


def categorize(subject: str) -> ProductCategory:
    """Return the first category whose keyword appears in ``subject``."""
    lowered = subject.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return ProductCategory.DEFAULT


def select_templates(mood: Mood, category: ProductCategory) -> tuple[str, ...]:
    """Pick the template set for a mood/category pair.

    Falls back to the mood's default set, then to the generic trendy set.
    """
    mood_templates = SCRIPT_TEMPLATES.get(mood, SCRIPT_TEMPLATES[FALLBACK_MOOD])
    return (
        mood_templates.get(category)
        or mood_templates.get(ProductCategory.DEFAULT)
        or SCRIPT_TEMPLATES[FALLBACK_MOOD][ProductCategory.DEFAULT]
    )
