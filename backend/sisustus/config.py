"""
Central configuration module for the Sisustus assistant backend.

Loads environment variables, defines store policies, FAQ entries, budget
buckets, style/colour/material tables, room menus, element specs, category
hints and LLM prompt templates.
"""

import os
from urllib.parse import urlparse

from dotenv import load_dotenv

load_dotenv()


def _normalize_base_url(value: str | None, fallback: str) -> str:
    """Return *value* without a trailing slash, or *fallback* if it is not a URL."""
    raw = (value or fallback).strip()
    parsed = urlparse(raw)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return fallback
    return raw.rstrip("/")


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------
STORE_BASE_URL = _normalize_base_url(os.getenv("STORE_BASE_URL"), "https://idastuudio.ee")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
USE_AI = os.getenv("USE_AI", "false").lower() == "true"

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")
CHATLOG_ENABLED = os.getenv("CHATLOG_ENABLED", "false").lower() == "true"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

# ---------------------------------------------------------------------------
# Catalog limits & cache TTLs
# ---------------------------------------------------------------------------
CATALOG_PAGE_SIZE = 100
MAX_CATALOG_PRODUCTS = 320
CATALOG_TTL_SECONDS = 5 * 60
CATEGORY_TREE_TTL_SECONDS = 10 * 60
CATEGORY_TREE_MAX_PAGES = 25
SEARCH_TTL_SECONDS = 60
DESCRIPTION_MAX_CHARS = 360

RECOMMEND_CANDIDATE_LIMIT = 60     # stop issuing search queries after this many
RECOMMEND_WIDEN_THRESHOLD = 12     # widen to the catalog below this many
RECOMMEND_WIDEN_LIMIT = 180
RECOMMEND_POOL_LIMIT = 120
ROOM_POOL_LIMIT = 80
ROOM_POOL_MIN_SIZE = 5
ELEMENT_FOCUS_LIMIT = 12
MAX_BUNDLES = 3
MAX_ALTERNATIVES = 4

# ---------------------------------------------------------------------------
# Store & support configuration
# ---------------------------------------------------------------------------
COMMERCE_CONFIG: dict = {
    "brand_name": "IDA SISUSTUSPOOD & STUUDIO",
    "currency_symbol": "€",
    "free_shipping_threshold": 0,
    "discount_thresholds": [],  # [{"subtotal": 500, "discount_pct": 5}, ...]
    "support_email": "info@idastuudio.ee",
    "support_phone": "+372 5623 0614",
    "support_hours": "E-R 10:00-17:00",
    "company_name": "TISLER DESIGNS OÜ",
    "company_reg": "14106877",
    "address": "IDA 7a, 93811 Kuressaare, Saaremaa",
    "showroom_address": "Kalevi 28, Kuressaare (Ringtee keskus)",
    "links": {
        "shipping": "/myygitingimused/",
        "returns": "/myygitingimused/",
        "contact": "/",
        "warranty": "/myygitingimused/",
        "terms": "/myygitingimused/",
        "payment": "/myygitingimused/",
        "privacy": "/andmekaitsetingimused/",
        "cart": "/ostukorv/",
    },
}

STORE_KNOWLEDGE: dict[str, list[str]] = {
    "KOHALETOIMETAMINE": [
        "Tarnehind lisandub vastavalt valitud tarneviisile (Itella SmartPOST, Omniva, kuller).",
        "Laos olevad tooted jõuavad kohale tavaliselt 1-3 tööpäevaga.",
        "Järeltellitavate toodete tarneaeg on 1-30 nädalat.",
        "Kui tellimuses on koos laotooted ja järeltellitavad tooted, postitatakse "
        "tellimus siis, kui kõik tooted on laos olemas.",
    ],
    "TAGASTAMINE": [
        "Taganemisõigus tarbijale on 14 päeva kauba kättesaamisest.",
        "Tagastamisavaldus tuleb saata vabas vormis aadressile info@idastuudio.ee.",
        "Tagastamiskulud kannab klient, v.a. defektse kauba puhul.",
        "Tagastatav kaup peab olema kasutamata, kahjustamata ja originaalpakendis.",
    ],
    "PRETENSIOONID / GARANTII": [
        "Pretensioon tuleb esitada e-postile info@idastuudio.ee koos kirjeldusega ning vajadusel fotodega.",
        "Transpordikahjustusest tuleb teavitada hiljemalt 3 päeva jooksul kauba kättesaamisest.",
    ],
    "MAKSE JA TARNED": [
        "Tasumine toimub tellimuse vormistamisel valitud makseviisi kaudu.",
        "Müügileping jõustub pärast makse laekumist.",
    ],
    "ETTEVÕTTEST": [
        "IDA on Eesti sisustuspood, kus on lai valik mööblit, valgusteid, vaipu ja koduaksessuaare.",
        "Füüsiline stuudiopood asub Kuressaares aadressil Kalevi 28 (Ringtee keskuses).",
    ],
    "PRIVAATSUS": [
        "Isikuandmete töötlemise alused ja õigused on kirjeldatud andmekaitsetingimustes.",
    ],
}

# Each entry: keywords scored against the normalised question, canned answer.
FAQ_ENTRIES: list[dict] = [
    {
        "topic": "shipping",
        "keywords": ["tarne", "shipping", "kohaletoimetamine", "laos", "järeltellitav", "jareltellitav"],
        "answer": (
            "Laos olevate toodete tarneaeg on tavaliselt 1-3 tööpäeva. Järeltellitavate "
            "toodete tarneaeg on 1-30 nädalat. Kui tellimuses on mõlemad koos, saadetakse "
            "kaup siis, kui kõik tooted on laos olemas."
        ),
    },
    {
        "topic": "returns",
        "keywords": ["tagast", "tagastus", "tagastamine", "returns", "refund", "taganemine", "raha tagasi"],
        "answer": (
            "Tarbijal on 14-päevane taganemisõigus kauba kättesaamisest. Tagastamisavaldus "
            "saada aadressile info@idastuudio.ee. Tagastamiskulud kannab üldjuhul klient, "
            "v.a. defektse kauba puhul."
        ),
    },
    {
        "topic": "warranty",
        "keywords": ["garantii", "pretensioon", "defekt", "katki", "reklamatsioon", "warranty"],
        "answer": (
            "Pretensioonide korral kirjuta info@idastuudio.ee ja lisa toote puuduse kirjeldus. "
            "Transpordikahjustusest palume teavitada esimesel võimalusel, kuid mitte hiljem "
            "kui 3 päeva jooksul kauba kättesaamisest."
        ),
    },
    {
        "topic": "contact",
        "keywords": ["kontakt", "telefon", "email", "e-post", "klienditugi", "support"],
        "answer": (
            "Kontakt: info@idastuudio.ee, telefon +372 5623 0614. Stuudiopood asub "
            "Kuressaares aadressil Kalevi 28 (Ringtee keskus)."
        ),
    },
    {
        "topic": "payment",
        "keywords": ["makse", "maksmine", "kassa", "pangalink", "ülekanne", "tarneviis"],
        "answer": (
            "Tellimuse vormistamisel saad valida sobiva makse- ja tarneviisi. Tarnepartnerid "
            "on Itella SmartPOST, Omniva ja kuller. Müügileping jõustub pärast makse laekumist."
        ),
    },
    {
        "topic": "privacy",
        "keywords": ["privaatsus", "isikuandmed", "andmekaitse", "gdpr", "privacy"],
        "answer": (
            "Isikuandmete töötlemise tingimused on kirjeldatud andmekaitsetingimustes. "
            "Õiguste teostamiseks saab pöörduda aadressile info@idastuudio.ee."
        ),
    },
    {
        "topic": "about",
        "keywords": ["meist", "kes te olete", "ettevõte", "firma"],
        "answer": (
            "IDA SISUSTUSPOOD & STUUDIO on Eesti sisustuspood, kus on lai valik mööblit, "
            "valgusteid, vaipu ja koduaksessuaare. Füüsiline stuudiopood asub Kuressaares."
        ),
    },
    {
        "topic": "terms",
        "keywords": ["tingimused", "müügitingimused", "muugitingimused", "leping"],
        "answer": (
            "Müügitingimused, tarne, tagastuse ja pretensioonide kord on kirjas lehel "
            "/myygitingimused/."
        ),
    },
]

# Ordered (topic, stems) rules for the recommended link; first hit wins.
FAQ_LINK_RULES: list[tuple[str, list[str]]] = [
    ("shipping", ["tarne", "shipping", "kohaletoimet", "kuller", "pakiautomaat", "laos", "jareltellit"]),
    ("returns", ["tagast", "refund", "return", "taganemis", "raha tagasi", "defekt"]),
    ("warranty", ["garantii", "warranty", "pretensioon", "reklamatsioon"]),
    ("payment", ["makse", "maksmine", "kaart", "pangalink", "ulekanne", "montonio"]),
    ("privacy", ["privaatsus", "isikuandmed", "gdpr", "andmekaitse"]),
    ("contact", ["kontakt", "telefon", "email", "e post", "klienditugi", "support"]),
    ("terms", ["tingimus", "muugitingimus", "tehing", "leping"]),
]

CHAT_SUGGESTIONS: list[str] = ["Tarne info", "Tagastamine", "Tingimused", "Makse ja tarne", "Kontakt"]
ESCALATION_SUGGESTIONS: list[str] = ["Jäta oma e-mail", "Kirjelda tellimuse number", "Soovin kõnet"]
FALLBACK_SUGGESTIONS: list[str] = ["Tarne info", "Tagastamine", "Kontakt"]

# ---------------------------------------------------------------------------
# Budget buckets (bundle builder)
# ---------------------------------------------------------------------------
BUDGET_CEILINGS: dict[str, float] = {
    "2000-4000": 4000,
    "4000-7000": 7000,
    "7000+": 20000,
}

BUDGET_TOLERANCE = 1.15  # prices above ceiling * tolerance are penalised

# ---------------------------------------------------------------------------
# Style, colour & material tables
# ---------------------------------------------------------------------------
STYLE_KEYWORDS: dict[str, list[str]] = {
    "Modern": ["modern", "minimalist", "kaasaegne", "contemporary"],
    "Skandinaavia": ["skandinaavia", "scandi", "nordic", "põhjamaade"],
    "Klassika": ["klassika", "klassikaline", "classic", "traditional"],
    "Industriaal": ["industriaal", "industrial", "metall", "metal"],
    "Boheem": ["boheem", "boho", "natural", "naturaalne"],
    "Luksus": ["luksus", "premium", "velvet", "samet", "marble", "marmor"],
}

COLOR_TONE_KEYWORDS: dict[str, list[str]] = {
    "Hele": ["valge", "white", "beige", "hele", "light", "krem"],
    "Tume": ["must", "black", "tume", "dark", "hall", "grey"],
    "Neutraalne": ["hall", "beige", "neutraalne", "natural", "naturaalne"],
    "Kontrast": ["kontrast", "must", "valge", "black", "white"],
}

NO_MATERIAL_PREFERENCE = "Pole vahet"

# material -> answer flags that make it a poor fit
MATERIAL_CONFLICTS: dict[str, list[str]] = {
    "kangas": ["has_pets", "has_children"],
    "nahk": ["has_pets"],
}

EASY_CLEAN_MATERIALS: list[str] = ["kunstnahk", "mikrofiiber", "washable"]

# ---------------------------------------------------------------------------
# Rooms (legacy keyword filter, role slots, anchor options)
# ---------------------------------------------------------------------------
ROOM_KEYWORDS: dict[str, list[str]] = {
    "Elutuba": ["diivan", "tool", "laud", "riiul", "kapp", "kapid", "elutuba", "living"],
    "Magamistuba": ["voodi", "madrats", "öökapp", "kummut", "magamistuba", "bedroom"],
    "Söögituba": ["söögilaud", "söögitool", "söögituba", "diningroom", "dining"],
    "Köök": ["köögimööbel", "kook", "köök", "kitchen"],
    "Kontor": [
        "kirjutuslaud", "kirjutuslauad", "töölaud", "töölauad", "arvutilaud",
        "arvutilauad", "kontoritool", "riiul", "kontor", "office",
    ],
    "Lastetuba": ["lastemööbel", "lastetuba", "laste", "kids", "children"],
    "Esik": ["esik", "riidekapp", "nagel", "hall", "hallway"],
}

BUNDLE_ROLES: dict[str, list[dict]] = {
    "Elutuba": [
        {"role": "ankur", "keywords": ["diivan", "sohva"], "required": True},
        {"role": "lisatoode", "keywords": ["tool", "tugitool", "laud", "kohvilaud"], "required": True},
        {"role": "aksessuaar", "keywords": ["vaip", "lamp", "padi", "riiul"], "required": False},
    ],
    "Magamistuba": [
        {"role": "ankur", "keywords": ["voodi", "voodiraam"], "required": True},
        {"role": "lisatoode", "keywords": ["öökapp", "kummut"], "required": True},
        {"role": "aksessuaar", "keywords": ["peegel", "lamp", "vaip"], "required": False},
    ],
    "Söögituba": [
        {"role": "ankur", "keywords": ["söögilaud", "laud"], "required": True},
        {"role": "lisatoode", "keywords": ["söögitool", "tool"], "required": True},
        {"role": "aksessuaar", "keywords": ["lamp", "vaip", "puhvet"], "required": False},
    ],
    "Köök": [
        {"role": "ankur", "keywords": ["köögimööbel", "kook"], "required": True},
        {"role": "lisatoode", "keywords": ["baartool", "tool"], "required": False},
        {"role": "aksessuaar", "keywords": ["lamp", "riiul"], "required": False},
    ],
    "Kontor": [
        {
            "role": "ankur",
            "keywords": ["kirjutuslaud", "kirjutuslauad", "töölaud", "töölauad", "arvutilaud", "arvutilauad"],
            "required": True,
        },
        {"role": "lisatoode", "keywords": ["kontoritool", "kontoritoolid", "office chair"], "required": True},
        {"role": "aksessuaar", "keywords": ["riiul", "lamp", "sahtlikapp"], "required": False},
    ],
    "Lastetuba": [
        {"role": "ankur", "keywords": ["lastemööbel", "voodi", "laud"], "required": True},
        {"role": "lisatoode", "keywords": ["tool", "riiul"], "required": True},
        {"role": "aksessuaar", "keywords": ["lamp", "vaip"], "required": False},
    ],
    "Esik": [
        {"role": "ankur", "keywords": ["riidekapp", "kapp"], "required": True},
        {"role": "lisatoode", "keywords": ["nagel", "pingike"], "required": False},
        {"role": "aksessuaar", "keywords": ["peegel", "vaip"], "required": False},
    ],
}

DEFAULT_ROLE_SLOTS: list[dict] = [
    {"role": "ankur", "keywords": [], "required": True},
    {"role": "lisatoode", "keywords": [], "required": True},
    {"role": "aksessuaar", "keywords": [], "required": False},
]

ROLE_WHY_CHOSEN: dict[str, str] = {
    "ankur": "Komplekti põhitoode",
    "lisatoode": "Täiendab põhitoodet",
    "aksessuaar": "Viimistleb ruumi",
}

AUTO_ANCHOR_LABEL = "Bot vali ise"

ANCHOR_OPTIONS: dict[str, list[str]] = {
    "Elutuba": ["Diivan", "Tugitool", "TV-kapp", AUTO_ANCHOR_LABEL],
    "Magamistuba": ["Voodi", "Kummut", "Öökapp", AUTO_ANCHOR_LABEL],
    "Söögituba": ["Söögilaud", "Söögitoolikomplekt", AUTO_ANCHOR_LABEL],
    "Köök": ["Köögimööbel", "Baartool", AUTO_ANCHOR_LABEL],
    "Kontor": ["Kirjutuslaud", "Kontoritool", "Riiulikapp", AUTO_ANCHOR_LABEL],
    "Lastetuba": ["Lastemööbel komplekt", "Laste voodi", "Lastelaud", AUTO_ANCHOR_LABEL],
    "Esik": ["Riidekapp", "Nagel", AUTO_ANCHOR_LABEL],
}

ANCHOR_ELEMENT_KEYS: dict[str, str] = {
    "Diivan": "sofa",
    "Tugitool": "armchair",
    "TV-kapp": "tv-cabinet",
    "Voodi": "bed",
    "Kummut": "dresser",
    "Öökapp": "nightstand",
    "Söögilaud": "dining-table",
    "Söögitoolikomplekt": "dining-chair",
    "Köögimööbel": "kitchen-furniture",
    "Baartool": "bar-stool",
    "Kirjutuslaud": "desk",
    "Kontoritool": "office-chair",
    "Riiulikapp": "shelf",
    "Lastemööbel komplekt": "kids-furniture",
    "Laste voodi": "bed",
    "Lastelaud": "desk",
    "Riidekapp": "wardrobe",
    "Nagel": "coat-rack",
}

# ---------------------------------------------------------------------------
# Element specs (category slugs + keyword aliases per furniture element)
# ---------------------------------------------------------------------------
# Insertion order matters for element inference: specific types first.
ELEMENT_SPECS: dict[str, dict[str, list[str]]] = {
    "nightstand": {
        "slugs": ["ookapid", "oo-kapid"],
        "keywords": ["öökapp", "ookapp", "öökapid", "nightstand"],
    },
    "tv-cabinet": {
        "slugs": ["tv-kapid", "tv-alused"],
        "keywords": ["tv-kapp", "tv kapp", "tvkapp", "tv-alus", "meediakapp"],
    },
    "sideboard": {
        "slugs": ["puhvetid", "kohvikapid", "vitriinkapid"],
        "keywords": ["puhvet", "vitriinkapp", "kohvikapp", "sideboard"],
    },
    "dresser": {
        "slugs": ["kummutid"],
        "keywords": ["kummut", "sahtlikapp", "dresser"],
    },
    "wardrobe": {
        "slugs": ["riidekapid", "garderoobid"],
        "keywords": ["riidekapp", "garderoob", "wardrobe"],
    },
    "shoe-rack": {
        "slugs": ["jalatsiriiulid"],
        "keywords": ["jalatsiriiul", "kingariiul", "jalatsikapp"],
    },
    "coat-rack": {
        "slugs": ["nagid", "nagid-redelid", "nagid-ja-redelid"],
        "keywords": ["nagel", "nagi", "riidepuu", "riidestange"],
    },
    "shelf": {
        "slugs": ["riiulid", "raamaturiiulid", "seinariiulid"],
        "keywords": ["riiul", "raamaturiiul", "seinariiul", "riiulikapp"],
    },
    "sofa": {
        "slugs": ["diivanid", "nurgadiivanid", "mooduldiivanid"],
        "keywords": ["diivan", "nurgadiivan", "mooduldiivan", "sohva", "sofa"],
    },
    "armchair": {
        "slugs": ["tugitoolid"],
        "keywords": ["tugitool", "armchair", "lounge chair"],
    },
    "office-chair": {
        "slugs": ["kontoritoolid"],
        "keywords": ["kontoritool", "office chair"],
    },
    "bar-stool": {
        "slugs": ["baaritoolid"],
        "keywords": ["baaritool", "baartool", "taburet", "bar stool"],
    },
    "dining-chair": {
        "slugs": ["soogitoolid"],
        "keywords": ["söögitool", "soogitool", "dining chair"],
    },
    "coffee-table": {
        "slugs": ["diivanilauad", "abilauad"],
        "keywords": ["diivanilaud", "kohvilaud", "abilaud", "coffee table"],
    },
    "dining-table": {
        "slugs": ["soogilauad"],
        "keywords": ["söögilaud", "soogilaud", "dining table"],
    },
    "desk": {
        "slugs": ["kirjutuslauad", "toolauad"],
        "keywords": ["kirjutuslaud", "töölaud", "toolaud", "arvutilaud", "lastelaud", "desk"],
    },
    "bed": {
        "slugs": ["voodid", "voodid-voodipeatsid", "voodiraamid"],
        "keywords": ["voodi", "voodiraam", "bed frame"],
    },
    "kids-furniture": {
        "slugs": ["lastetuba", "lastemoobel"],
        "keywords": ["lastemööbel", "lastetuba", "laste"],
    },
    "kitchen-furniture": {
        "slugs": ["kook", "koogimoobel"],
        "keywords": ["köögimööbel", "köögikapp", "köögisaar"],
    },
    "bench": {
        "slugs": ["pingid"],
        "keywords": ["pingike", "pink", "bench"],
    },
    "lighting": {
        "slugs": ["valgustid", "laevalgustid", "lauavalgustid", "porandavalgustid"],
        "keywords": ["valgusti", "lamp", "laevalgusti", "pendel"],
    },
    "rug": {
        "slugs": ["vaibad"],
        "keywords": ["vaip", "vaiba", "rug"],
    },
    "mirror": {
        "slugs": ["peeglid"],
        "keywords": ["peegel", "peegl", "mirror"],
    },
    "decor": {
        "slugs": ["kodu-aksessuaarid", "dekoratsioonid", "padjad"],
        "keywords": ["dekoratsioon", "vaas", "küünlajalg", "padi", "aksessuaar"],
    },
}

ACCESSORY_ELEMENT_KEYS: set[str] = {"lighting", "rug", "decor", "mirror"}

ROOM_MENUS: dict[str, dict] = {
    "Elutuba": {
        "allowed_slugs": [
            "elutuba", "diivanid", "tugitoolid", "diivanilauad", "tv-kapid", "riiulid",
            "valgustid", "vaibad", "kodu-aksessuaarid",
        ],
        "excluded_slugs": ["voodid", "soogilauad", "kontoritoolid", "kook", "vannituba"],
        "elements": {
            "Diivan": "sofa",
            "Tugitool": "armchair",
            "Diivanilaud": "coffee-table",
            "TV-kapp": "tv-cabinet",
            "Riiul": "shelf",
            "Valgusti": "lighting",
            "Vaip": "rug",
            "Dekoratsioonid": "decor",
        },
    },
    "Magamistuba": {
        "allowed_slugs": [
            "magamistuba", "voodid", "ookapid", "kummutid", "riidekapid", "peeglid",
            "valgustid", "vaibad",
        ],
        "excluded_slugs": ["soogilauad", "soogitoolid", "kontoritoolid", "kook", "aed-terrass"],
        "elements": {
            "Voodi": "bed",
            "Öökapp": "nightstand",
            "Kummut": "dresser",
            "Riidekapp": "wardrobe",
            "Peegel": "mirror",
            "Valgusti": "lighting",
            "Vaip": "rug",
        },
    },
    "Söögituba": {
        "allowed_slugs": ["soogituba", "soogilauad", "soogitoolid", "puhvetid", "valgustid", "vaibad"],
        "excluded_slugs": ["voodid", "kontoritoolid", "diivanid", "vannituba"],
        "elements": {
            "Söögilaud": "dining-table",
            "Söögitoolid": "dining-chair",
            "Puhvet": "sideboard",
            "Valgusti": "lighting",
            "Vaip": "rug",
        },
    },
    "Köök": {
        "allowed_slugs": ["kook", "koogimoobel", "baaritoolid", "riiulid", "valgustid"],
        "excluded_slugs": ["voodid", "diivanid", "kontoritoolid", "vannituba"],
        "elements": {
            "Köögimööbel": "kitchen-furniture",
            "Baaritool": "bar-stool",
            "Riiul": "shelf",
            "Valgusti": "lighting",
        },
    },
    "Kontor": {
        "allowed_slugs": ["kontor", "kirjutuslauad", "toolauad", "kontoritoolid", "riiulid", "valgustid"],
        "excluded_slugs": ["soogilauad", "soogitoolid", "voodid", "diivanid", "kook"],
        "elements": {
            "Kirjutuslaud / töölaud": "desk",
            "Kontoritool": "office-chair",
            "Riiulikapp": "shelf",
            "Valgusti": "lighting",
            "Vaip": "rug",
        },
    },
    "Lastetuba": {
        "allowed_slugs": ["lastetuba", "lastemoobel", "voodid", "riiulid", "valgustid", "vaibad"],
        "excluded_slugs": ["baaritoolid", "kontoritoolid", "aed-terrass"],
        "elements": {
            "Lastemööbel": "kids-furniture",
            "Laste voodi": "bed",
            "Laud / töölaud": "desk",
            "Riiul": "shelf",
            "Valgusti": "lighting",
            "Vaip": "rug",
        },
    },
    "Esik": {
        "allowed_slugs": ["esik", "riidekapid", "nagid", "jalatsiriiulid", "peeglid", "pingid"],
        "excluded_slugs": ["voodid", "soogilauad", "kontoritoolid", "diivanid"],
        "elements": {
            "Riidekapp": "wardrobe",
            "Nagel": "coat-rack",
            "Jalatsiriiul": "shoe-rack",
            "Peegel": "mirror",
            "Pingike": "bench",
        },
    },
}

DEFECT_MARKERS: list[str] = ["defekt", "kahjustus", "kahjustatud", "b kaup", "vigane"]

TRUE_BED_MARKERS: list[str] = ["voodi", "voodiraam", "bed frame"]
SOFA_BED_MARKERS: list[str] = ["diivanvoodi", "magamisdiivan", "sofa bed", "diivan"]

# ---------------------------------------------------------------------------
# Category clarification hints
# ---------------------------------------------------------------------------
MAIN_CATEGORY_HINTS: list[dict] = [
    {"main_category": "KÖÖK", "product_type_hints": [], "keywords": ["kook", "koogis", "soogiriist", "lauanoud"]},
    {
        "main_category": "KODU AKSESSUAARID",
        "product_type_hints": [],
        "keywords": ["aksessuaar", "dekoratsioon", "sisustusdetail"],
    },
    {
        "main_category": "VALGUSTID",
        "product_type_hints": ["light"],
        "keywords": ["valgusti", "lamp", "laevalgusti", "porandalamp", "lauavalgusti"],
    },
    {
        "main_category": "TOOLID",
        "product_type_hints": ["chair"],
        "keywords": ["tool", "toolid", "chair", "kontoritool", "tugitool", "baaritool", "taburet", "pink", "tumba"],
    },
    {
        "main_category": "LAUAD",
        "product_type_hints": ["table"],
        "keywords": ["laud", "lauad", "soogilaud", "diivanilaud", "abilaud", "kirjutuslaud", "konsoollaud"],
    },
    {
        "main_category": "RIIULID",
        "product_type_hints": ["shelf"],
        "keywords": ["riiul", "riiulid", "seinariiul", "raamaturiiul"],
    },
    {
        "main_category": "KAPID",
        "product_type_hints": ["generic-cabinet", "dresser", "tv-cabinet", "nightstand", "display-cabinet"],
        "keywords": ["kapp", "kapid", "ookapp", "tvkapp", "vitriinkapp", "kummut"],
    },
    {
        "main_category": "DIIVANID",
        "product_type_hints": ["sofa"],
        "keywords": ["diivan", "diivanid", "nurgadiivan", "mooduldiivan", "sohva"],
    },
    {"main_category": "NAGID & REDELID", "product_type_hints": [], "keywords": ["nagi", "nagid", "redel", "redelid"]},
    {
        "main_category": "VOODID & VOODIPEATSID",
        "product_type_hints": ["bed"],
        "keywords": ["voodi", "voodid", "voodipeats", "madrats"],
    },
    {"main_category": "PEEGLID", "product_type_hints": ["mirror"], "keywords": ["peegel", "peeglid"]},
    {"main_category": "VAIBAD", "product_type_hints": ["rug"], "keywords": ["vaip", "vaibad"]},
    {"main_category": "VANNITUBA", "product_type_hints": [], "keywords": ["vannituba", "vannitoa"]},
    {"main_category": "LASTETUBA", "product_type_hints": [], "keywords": ["lastetuba", "laste", "lastetoa"]},
    {
        "main_category": "AED & TERRASS",
        "product_type_hints": ["outdoor-furniture"],
        "keywords": ["aed", "terrass", "oue", "aiamoobel"],
    },
]

MAX_CLARIFICATION_OPTIONS = 10
CLARIFICATION_MARKER = "tapsusta palun kategooria"

# Product type -> store search term
PRODUCT_TYPE_SEARCH_TERMS: dict[str, str] = {
    "nightstand": "öökapp",
    "tv-cabinet": "tv-kapp",
    "display-cabinet": "vitriinkapp",
    "dresser": "kummut",
    "shelf": "riiul",
    "sofa": "diivan",
    "chair": "tool",
    "table": "laud",
    "bed": "voodi",
    "generic-cabinet": "kapp",
    "light": "valgusti",
    "rug": "vaip",
    "mirror": "peegel",
    "outdoor-furniture": "aiamööbel",
}

# ---------------------------------------------------------------------------
# LLM prompts
# ---------------------------------------------------------------------------

STRICT_RULES = f"""\
REEGLID, mida sa PEAD järgima:
1. Vasta AINULT allpool toodud poe teabe põhjal. Kui vastust ei ole teabes olemas, \
ütle ausalt "Kahjuks ei oska sellele vastata. Palun võta ühendust \
{COMMERCE_CONFIG['support_email']} või helista {COMMERCE_CONFIG['support_phone']}."
2. Ära kunagi leiuta fakte, hindu, tähtaegu ega tingimusi, mida teabes pole.
3. Vasta eesti keeles, lühidalt (1-3 lauset), sõbralikult ja konkreetselt.
4. Ära väljasta tootenimesid, hindu ega tootekaarte tekstivastusena.
5. Kui klient on vihane või probleem on tõsine, suuna alati kontakti: \
{COMMERCE_CONFIG['support_email']}, {COMMERCE_CONFIG['support_phone']}.
6. Sa oled IDA Sisustuspood klienditoe assistent.
"""

SUPPORT_SYSTEM_PROMPT = """\
Sa oled IDA Sisustuspood klienditoe vestlusassistent.

{rules}
POE TEAVE:
{knowledge}
"""

PRODUCT_SET_SUMMARY_PROMPT = """\
Sa oled IDA Sisustuspood tooteekspert. Sulle antakse kliendi sõnum ja valitud \
toodete nimekiri. Kirjuta lühike (2-3 lauset) eestikeelne kokkuvõte, mis selgitab \
kuidas need tooted kokku sobivad (stiil, funktsioon, ruumilahendus). Ära korda iga \
toote nime eraldi. Tagasta AINULT kokkuvõtte tekst.
"""

SEARCH_QUERIES_PROMPT = """\
Sa oled e-poe otsinguassistent. Sinu ülesanne on teha kliendi tekstist head \
WooCommerce otsingupäringud.

Tagasta AINULT JSON objekt kujul:
{"queries":["..."]}

REEGLID:
1. Tagasta 3-8 lühikest otsingupäringut.
2. Kasuta esmalt konkreetset tootetüüpi (nt kontoritool, öökapp, diivanilaud).
3. Lisa vajadusel sünonüümid ja ingliskeelne vaste (nt "chair", "office chair").
4. Kui klient mainib omadusi (värv, materjal, stiil), lisa need eraldi päringutena.
5. Ära lisa seletusi, ainult JSON.
"""

PRODUCT_PICKS_PROMPT = """\
Sa oled IDA Sisustuspood tooteekspert. Sinu ülesanne on valida kliendi vajadustele \
kõige sobivamad tooted kataloogist.

REEGLID:
1. Vali AINULT tooted, mis on kataloogis olemas. Ära leiuta tooteid.
2. Tüübiloogika on range: kui klient küsib konkreetset tüüpi (nt "öökapp"), siis \
ÄRA paku teisi tüüpe (nt vitriinkapp, riiul, TV-kapp).
3. Kui sobib ainult 1 toode, tagasta ainult 1. Kui ükski ei sobi, tagasta [].
4. Iga toote kohta kirjuta lühike eestikeelne põhjendus (1 lause).
5. Tagasta JSON massiiv kujul: [{"handle":"toote-slug","reason":"Põhjendus"}]
6. Eelisjärjestus: kõige sobivam toode esimesena.
"""

INTENT_PROMPT = """\
Sa oled e-kaubanduse vestluse intentide klassifitseerija.

Tagasta AINULT JSON objekt kujul:
{"intent":"greeting|shipping|returns|faq|order_help|product_reco|smalltalk","confidence":0.0-1.0}

REEGLID:
- Lühike "okei", "aitäh", "selge", "jah", "ei" ilma küsimuseta => "smalltalk".
- Tarne/kohaletoimetamine => "shipping". Tagastus/taganemine/pretensioon => "returns".
- Garantii, kontaktid, makseviisid, privaatsus, tingimused => "faq".
- Tellimuse staatus/makse/arve => "order_help".
- Toote otsing või soovitus => "product_reco". Puhas tervitus => "greeting".
- Klassifitseeri kasutaja VIIMANE sõnum, ajalugu on ainult kontekstiks.
"""

BUNDLE_GENERATION_PROMPT = """\
Sa oled IDA Stuudio sisekujundusnõustaja, kes koostab personaalseid mööblikomplekte.

Saad kliendi eelistused ja poe kataloogist filtreeritud toodete nimekirja. Vali \
kataloogist sobivad tooted ja koosta 1-3 erinevat terviklikku mööblikomplekti.

REEGLID:
- Vali AINULT elemendid, mida klient on märkinud "Valitud elemendid" nimekirjas.
- Iga toode täidab unikaalse rolli, ära lisa samast kategooriast mitut toodet.
- Rollid: 1 "ankur", 1-3 "lisatoode", 1-2 "aksessuaar".
- Kui on lapsed või lemmikloomad, väldi kangast/nahka; eelista kunstnahka, mikrofiibrit.
- Iga komplekt peab erinema teistest.
- Kui kataloogis pole mõnele elemendile sobivat toodet, jäta see element vahele.

Tagasta AINULT JSON massiiv:
[{"title":"...","styleSummary":"...","keyReasons":["..."],"tradeoffs":["..."],
  "items":[{"id":"toote_id","roleInBundle":"ankur|lisatoode|aksessuaar","whyChosen":"..."}]}]
"""

BUNDLE_SUMMARY_PROMPT = """\
Sa oled IDA Stuudio sisekujundusnõustaja. Sulle antakse kliendi eelistused ja \
valmis mööblikomplektid. Kirjuta igale komplektile atraktiivne pealkiri (max 5 sõna) \
ja 1-2 lauseline stiilikokkuvõte eesti keeles. Ära muuda tooteid.

Tagasta AINULT JSON massiiv samas järjekorras:
[{"title":"...","styleSummary":"..."}]
"""
