"""Brand and keyword taxonomy tables used to expand search phrases into category tags."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Pattern, Sequence, Tuple

logger = logging.getLogger(__name__)

_BETTING = ("betting", "sports betting", "casino", "gambling")
_BETTING_SLOTS = ("betting", "casino", "sports betting", "gambling", "slots")
_SPORTS = ("betting", "sports betting", "casino")
_CRYPTO = ("casino", "gambling", "crypto")
_ESPORTS = ("esports betting", "betting", "casino")
_SPORTS_ONLY = ("betting", "sports betting")
_SPORTS_CASINO = ("sports betting", "casino")
_CSGO = ("casino", "gambling", "crypto", "csgo")


@dataclass(frozen=True)
class TaxonomyEntry:
    """One brand or keyword and the canonical category tags it expands to."""

    pattern: str
    tags: Tuple[str, ...]
    group: str = ""


def _entries(group: str, table: Dict[str, Sequence[str]]) -> List[TaxonomyEntry]:
    return [TaxonomyEntry(pattern=key, tags=tuple(value), group=group) for key, value in table.items()]


BRAND_TAXONOMY: List[TaxonomyEntry] = (
    _entries("latam_operators", {
        "betano": _BETTING_SLOTS,
        "bet365": _BETTING,
        "codere": _BETTING,
        "caliente": _BETTING_SLOTS,
        "betsson": _BETTING_SLOTS,
        "betway": _BETTING,
        "pinup": _BETTING_SLOTS,
        "pin-up": _BETTING_SLOTS,
        "pin up": _BETTING_SLOTS,
        "caliente.mx": _BETTING,
        "betcris": _BETTING,
        "te apuesto": _BETTING,
        "telmo": _SPORTS,
        "strendus": _BETTING,
        "wplay": _BETTING,
        "rushbet": _BETTING,
        "zamba": _BETTING,
        "betjuego": _SPORTS,
        "apuestatotal": _BETTING,
        "betwarrior": _BETTING,
        "enjoy": ("casino", "gambling"),
        "betfair": _BETTING,
        "sportingbet": _SPORTS,
        "rivalo": _BETTING,
        "doradobet": _BETTING,
        "inkabet": _BETTING,
        "solbet": _SPORTS,
        "betmotion": _BETTING,
        "brazino777": ("casino", "gambling", "slots"),
        "pixbet": _SPORTS,
        "blaze": _CRYPTO,
        "esporte da sorte": ("sports betting", "casino", "gambling"),
        "reals": _SPORTS,
        "betnacional": _SPORTS_CASINO,
        "f12bet": _SPORTS_CASINO,
        "superbet": ("sports betting", "casino", "gambling"),
        "novibet": ("sports betting", "casino", "gambling"),
    })
    + _entries("european_operators", {
        "william hill": _BETTING,
        "ladbrokes": _BETTING,
        "coral": _SPORTS,
        "paddy power": _BETTING,
        "sky bet": _SPORTS_ONLY,
        "betfred": _SPORTS,
        "betvictor": _SPORTS,
        "888sport": _SPORTS,
        "888casino": ("casino", "slots", "gambling"),
        "888poker": ("poker", "casino", "gambling"),
        "bwin": _BETTING,
        "unibet": _BETTING,
        "mr green": ("casino", "gambling", "sports betting"),
        "casumo": ("casino", "gambling", "slots"),
        "leovegas": ("casino", "gambling", "sports betting"),
        "bethard": _SPORTS,
        "nordicbet": _SPORTS,
        "coolbet": _SPORTS,
        "paf": ("casino", "gambling", "betting"),
        "tipico": _SPORTS,
        "bwin.de": _SPORTS,
        "bet-at-home": _SPORTS,
        "toto": _SPORTS_ONLY,
        "betcity.nl": _SPORTS,
        "holland casino": ("casino", "gambling"),
        "pmu": ("betting", "sports betting", "horse racing"),
        "parionssport": _SPORTS_ONLY,
        "winamax": ("poker", "sports betting"),
        "snai": _SPORTS,
        "sisal": _SPORTS,
        "lottomatica": ("betting", "casino", "lottery"),
        "eurobet": _SPORTS,
        "sportium": _SPORTS,
        "marca apuestas": _SPORTS_ONLY,
        "paf.es": ("casino", "gambling", "betting"),
        "interwetten": _SPORTS_CASINO,
        "sportingindex": ("sports betting",),
        "spreadex": ("sports betting",),
        "matchbook": ("sports betting",),
        "smarkets": ("sports betting",),
        "betdaq": ("sports betting",),
        "mansion88": ("casino", "gambling", "sports betting"),
        "nextbet": _SPORTS_CASINO,
        "tipsport": _SPORTS_CASINO,
        "chance": _SPORTS_CASINO,
        "fortuna": _SPORTS_CASINO,
        "niké": ("sports betting",),
        "synottip": _SPORTS_CASINO,
        "tonybet": ("sports betting", "casino", "poker"),
        "redbet": _SPORTS_CASINO,
        "betrebels": _SPORTS_CASINO,
        "campeonbet": _SPORTS_CASINO,
        "vbet": _SPORTS_CASINO,
        "winmasters": _SPORTS_CASINO,
        "netbet": ("sports betting", "casino", "poker"),
    })
    + _entries("asian_operators", {
        "sbobet": _BETTING,
        "fun88": _BETTING,
        "dafabet": _BETTING,
        "w88": _BETTING,
        "12bet": _SPORTS,
        "m88": _SPORTS,
        "188bet": _SPORTS,
        "maxbet": _SPORTS_ONLY,
        "cmd368": ("sports betting",),
        "ibcbet": ("sports betting",),
        "uwin": ("casino", "sports betting"),
        "letou": _SPORTS_CASINO,
        "happyluke": _SPORTS_CASINO,
        "vwin": _SPORTS_CASINO,
    })
    + _entries("global_operators", {
        "1xbet": _BETTING_SLOTS,
        "1xbit": ("betting", "casino", "sports betting", "gambling", "crypto"),
        "1xslots": ("casino", "slots", "gambling"),
        "22bet": _BETTING,
        "melbet": _BETTING_SLOTS,
        "betwinner": _BETTING,
        "parimatch": _BETTING,
        "marathonbet": _SPORTS_ONLY,
        "marathon": _SPORTS_ONLY,
        "pinnacle": _SPORTS_ONLY,
        "10bet": _SPORTS,
        "20bet": _SPORTS,
        "megapari": _BETTING,
        "mostbet": _BETTING,
        "linebet": _SPORTS,
        "betboom": _SPORTS,
        "leonbet": _SPORTS,
        "betcity": _SPORTS,
        "olimpbet": _SPORTS_ONLY,
        "fonbet": _SPORTS,
        "ligastavok": _SPORTS_ONLY,
        "winline": _SPORTS,
        "bodog": ("betting", "casino", "sports betting", "gambling", "poker"),
        "bovada": ("betting", "casino", "sports betting", "gambling", "poker"),
        "intertops": ("sports betting", "casino", "poker"),
        "betonline": ("sports betting", "casino", "poker", "gambling"),
        "mybookie": _SPORTS_CASINO,
        "xbet": _SPORTS_CASINO,
        "heritage": ("sports betting",),
        "5dimes": _SPORTS_CASINO,
    })
    + _entries("poker_brands", {
        "pokerstars": ("poker", "casino", "gambling", "sports betting"),
        "partypoker": ("poker", "casino", "gambling"),
        "ggpoker": ("poker", "casino", "gambling"),
        "pokerking": ("poker", "casino"),
        "natural8": ("poker", "casino"),
        "wsop": ("poker", "casino"),
    })
    + _entries("casino_brands", {
        "casino.com": ("casino", "gambling", "slots"),
        "borgata": ("casino", "gambling"),
        "golden nugget": ("casino", "gambling"),
        "harrahs": ("casino", "gambling"),
        "virgin casino": ("casino", "gambling"),
        "bet rivers": ("casino", "gambling", "sports betting"),
    })
    + _entries("crypto_gambling", {
        "stake": ("casino", "gambling", "crypto", "slots", "sports betting"),
        "stake.com": ("casino", "gambling", "crypto", "slots", "sports betting"),
        "rollbit": ("casino", "gambling", "crypto", "slots"),
        "bc.game": ("casino", "gambling", "crypto", "sports betting"),
        "bc game": ("casino", "gambling", "crypto", "sports betting"),
        "duelbits": _CRYPTO,
        "roobet": ("casino", "gambling", "slots", "crypto"),
        "shuffle": _CRYPTO,
        "shuffle.com": _CRYPTO,
        "cloudbet": ("betting", "sports betting", "casino", "crypto"),
        "bitcasino": _CRYPTO,
        "bitcasino.io": _CRYPTO,
        "sportsbet.io": ("sports betting", "casino", "crypto"),
        "wolf.bet": _CRYPTO,
        "wolfbet": _CRYPTO,
        "bets.io": ("sports betting", "casino", "crypto"),
        "empire.io": _CRYPTO,
        "fortunejack": _CRYPTO,
        "bitslot": ("casino", "slots", "crypto"),
        "trustdice": _CRYPTO,
        "bitspinwin": _CRYPTO,
        "wildcoins": _CRYPTO,
        "jackbit": ("casino", "gambling", "crypto", "sports betting"),
        "metaspins": _CRYPTO,
        "vave": ("casino", "gambling", "crypto", "sports betting"),
        "bitubet": _CRYPTO,
        "coins.game": _CRYPTO,
        "fairspin": _CRYPTO,
        "betfury": _CRYPTO,
        "cryptoleo": _CRYPTO,
        "mystake": ("casino", "gambling", "crypto", "sports betting"),
        "gamdom": _CSGO,
        "csgoroll": _CSGO,
        "csgo500": _CSGO,
        "csgoluck": _CSGO,
        "csgoempire": _CSGO,
        "nitrogen": ("sports betting", "casino", "crypto"),
        "nitrogen sports": ("sports betting", "crypto"),
        "bitstarz": _CRYPTO,
        "kingbilly": _CRYPTO,
        "7bitcasino": _CRYPTO,
        "bitcoincasino.us": _CRYPTO,
        "bitdreams": _CRYPTO,
        "vegas": _CRYPTO,
    })
    + _entries("esports_betting", {
        "gg.bet": ("esports betting", "betting", "casino", "gambling"),
        "ggbet": ("esports betting", "betting", "casino", "gambling"),
        "buff.bet": ("esports betting", "betting"),
        "buffbet": ("esports betting", "betting"),
        "loot.bet": _ESPORTS,
        "lootbet": _ESPORTS,
        "rivalry": _ESPORTS,
        "thunderpick": ("esports betting", "betting", "casino", "crypto"),
        "arcanebet": _ESPORTS,
        "eggbet": _ESPORTS,
        "betbeast": ("esports betting", "betting"),
        "picklebet": ("esports betting", "betting"),
    })
    + _entries("us_operators", {
        "fanduel": ("sports betting", "casino", "gambling", "fantasy sports"),
        "draftkings": ("sports betting", "casino", "gambling", "fantasy sports"),
        "betmgm": ("sports betting", "casino", "gambling"),
        "caesars sportsbook": ("sports betting", "casino", "gambling"),
        "barstool": _SPORTS_CASINO,
        "pointsbet": _SPORTS_CASINO,
        "foxbet": _SPORTS_CASINO,
        "sugarhouse": _SPORTS_CASINO,
    })
    + _entries("australian_operators", {
        "sportsbet": ("sports betting", "betting"),
        "bet365.au": ("sports betting", "betting", "gambling"),
        "ladbrokes.au": ("sports betting", "betting"),
        "tab": ("sports betting", "betting", "horse racing"),
        "neds": ("sports betting", "betting"),
        "unibet.au": ("sports betting", "betting"),
        "pointsbet.au": ("sports betting", "betting"),
    })
    + _entries("african_operators", {
        "betway.africa": ("sports betting", "betting", "casino"),
        "hollywoodbets": ("sports betting", "betting", "casino"),
        "supabets": ("sports betting", "betting"),
        "betway.za": ("sports betting", "betting", "casino"),
        "10bet.africa": ("sports betting", "betting", "casino"),
    })
    + _entries("fantasy_sports", {
        "yahoo fantasy": ("fantasy sports",),
        "espn fantasy": ("fantasy sports",),
        "sleeper": ("fantasy sports",),
        "underdog": ("fantasy sports",),
        "prizepicks": ("fantasy sports",),
        "parlayplay": ("fantasy sports",),
    })
)

# Single hot-keywords whose presence always adds every variant tag.
KEYWORD_TAXONOMY: List[TaxonomyEntry] = (
    _entries("games", {
        "gta": ("gta", "grand theft auto"),
        "valorant": ("valorant",),
        "fortnite": ("fortnite",),
        "minecraft": ("minecraft",),
        "cod": ("call of duty", "cod", "warzone"),
        "fifa": ("fifa",),
        "league of legends": ("league of legends", "lol"),
        "dota": ("dota",),
        "csgo": ("counter-strike", "csgo", "cs2", "cs:go"),
        "apex": ("apex legends", "apex"),
    })
    + _entries("gambling", {
        "casino": ("casino", "slots", "roulette", "blackjack", "gambling", "baccarat", "craps"),
        "poker": ("poker", "casino", "texas holdem", "gambling"),
        "slots": ("slots", "casino", "gambling", "slot machines"),
        "betting": ("betting", "sports betting", "casino", "gambling", "sportsbook"),
        "gambling": ("gambling", "casino", "betting", "wagering"),
        "roulette": ("roulette", "casino", "gambling"),
        "blackjack": ("blackjack", "casino", "gambling", "21"),
        "baccarat": ("baccarat", "casino", "gambling"),
        "craps": ("craps", "casino", "gambling"),
        "bingo": ("bingo", "casino", "gambling"),
        "keno": ("keno", "casino", "gambling"),
        "lottery": ("lottery", "gambling"),
        "scratch": ("scratch cards", "gambling", "lottery"),
        "sportsbook": ("sportsbook", "sports betting", "betting"),
        "bookmaker": ("bookmaker", "betting", "sports betting"),
        "odds": ("betting", "sports betting", "gambling"),
        "wager": ("wagering", "betting", "gambling"),
        "jackpot": ("jackpot", "casino", "gambling", "slots"),
        "dice": ("dice", "casino", "gambling", "craps"),
    })
)


def _compile(pattern: str, *, whole_word: bool) -> Pattern[str]:
    body = r"\s+".join(re.escape(part) for part in pattern.lower().split())
    if whole_word:
        return re.compile(rf"(?<![\w]){body}(?![\w])", re.IGNORECASE)
    return re.compile(rf"(?<![\w]){body}", re.IGNORECASE)


def load_taxonomy(path: str) -> Tuple[List[TaxonomyEntry], List[TaxonomyEntry]]:
    """Load brand and keyword tables from a JSON file.

    The file holds ``{"brands": [...], "keywords": [...]}`` where each item is
    ``{"pattern": str, "tags": [str, ...], "group": str}``.
    """
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)

    def parse(items: Iterable[dict]) -> List[TaxonomyEntry]:
        entries: List[TaxonomyEntry] = []
        for item in items or []:
            pattern = str(item.get("pattern", "")).strip().lower()
            tags = tuple(str(tag).strip().lower() for tag in item.get("tags", []) if str(tag).strip())
            if pattern and tags:
                entries.append(TaxonomyEntry(pattern=pattern, tags=tags, group=str(item.get("group", ""))))
        return entries

    brands = parse(payload.get("brands"))
    keywords = parse(payload.get("keywords"))
    logger.info("Loaded taxonomy from %s (%d brands, %d keywords)", path, len(brands), len(keywords))
    return brands or list(BRAND_TAXONOMY), keywords or list(KEYWORD_TAXONOMY)


class BrandTaxonomyResolver:
    """Resolve brand names and hot keywords in query text to canonical category tags."""

    def __init__(
        self,
        brands: Optional[Sequence[TaxonomyEntry]] = None,
        keywords: Optional[Sequence[TaxonomyEntry]] = None,
    ) -> None:
        self.brands = list(BRAND_TAXONOMY if brands is None else brands)
        self.keywords = list(KEYWORD_TAXONOMY if keywords is None else keywords)
        self._brand_patterns = [(entry, _compile(entry.pattern, whole_word=True)) for entry in self.brands]
        # Keywords only need a leading boundary so "slots" or "gta5" still count.
        self._keyword_patterns = [(entry, _compile(entry.pattern, whole_word=False)) for entry in self.keywords]

    @classmethod
    def from_file(cls, path: Optional[str]) -> "BrandTaxonomyResolver":
        if not path:
            return cls()
        brands, keywords = load_taxonomy(path)
        return cls(brands=brands, keywords=keywords)

    def match_brands(self, text: str) -> List[TaxonomyEntry]:
        lowered = (text or "").lower()
        return [entry for entry, pattern in self._brand_patterns if pattern.search(lowered)]

    def match_keywords(self, text: str) -> List[TaxonomyEntry]:
        lowered = (text or "").lower()
        return [entry for entry, pattern in self._keyword_patterns if pattern.search(lowered)]

    def resolve(self, text: str) -> List[str]:
        """Category tags for every brand found in ``text`` (may be empty)."""
        tags: List[str] = []
        for entry in self.match_brands(text):
            tags.extend(entry.tags)
        return tags

    def expand_keywords(self, text: str, tags: List[str]) -> List[str]:
        """Append every variant of each hot keyword present in ``text``."""
        expanded = list(tags)
        for entry in self.match_keywords(text):
            expanded.extend(entry.tags)
            logger.debug("Keyword detected | keyword=%s variants=%s", entry.pattern, entry.tags)
        return expanded

    def expand_brands(self, text: str, tags: List[str]) -> List[str]:
        """Swap the phrase tag that mentions a brand for its categories, or append them."""
        expanded = list(tags)
        for entry in self.match_brands(text):
            index = next((i for i, tag in enumerate(expanded) if entry.pattern in tag.lower()), -1)
            if index >= 0:
                expanded[index:index + 1] = list(entry.tags)
            else:
                expanded.extend(entry.tags)
            logger.debug("Brand mapped | brand=%s categories=%s", entry.pattern, entry.tags)
        return expanded
