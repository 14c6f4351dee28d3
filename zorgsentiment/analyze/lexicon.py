"""Dutch sentiment lexicon tuned for healthcare and health insurance news.

Weights follow the AFINN convention: integers from -5 (very negative) to
+5 (very positive). Keys are lower-case single tokens.
"""

from __future__ import annotations

from types import MappingProxyType

_LABELS = {
    # --- General positive ---
    "goed": 2,
    "goede": 2,
    "beter": 2,
    "betere": 2,
    "best": 3,
    "beste": 3,
    "prima": 2,
    "fijn": 2,
    "fijne": 2,
    "mooi": 2,
    "mooie": 2,
    "uitstekend": 4,
    "uitstekende": 4,
    "fantastisch": 4,
    "geweldig": 4,
    "geweldige": 4,
    "top": 3,
    "blij": 3,
    "tevreden": 2,
    "tevredenheid": 2,
    "positief": 2,
    "positieve": 2,
    "succes": 3,
    "succesvol": 3,
    "succesvolle": 3,
    "hoop": 1,
    "hoopvol": 2,
    "optimistisch": 2,
    "sterk": 2,
    "sterke": 2,
    "veilig": 2,
    "veilige": 2,
    "gezond": 2,
    "gezonde": 2,
    "helpen": 2,
    "helpt": 2,
    "hulp": 1,
    "steun": 2,
    "ondersteuning": 2,
    "oplossing": 2,
    "oplossingen": 2,
    "opgelost": 2,
    "winst": 2,
    "voordeel": 2,
    "voordelen": 2,
    "voordelig": 2,
    "voordelige": 2,
    "welkom": 2,
    "dank": 2,
    "bedankt": 2,
    "eerlijk": 2,
    "eerlijke": 2,
    "duidelijk": 1,
    "duidelijke": 1,
    "snel": 1,
    "snelle": 1,
    "handig": 1,
    "vooruitgang": 2,
    "doorbraak": 3,
    "genezen": 3,
    "herstel": 2,
    "hersteld": 2,
    "redden": 2,
    "gered": 2,
    "akkoord": 1,
    "goedgekeurd": 2,
    "gelukkig": 3,
    "trots": 2,
    "toegankelijk": 2,
    "toegankelijke": 2,
    "betaalbaar": 2,
    "betaalbare": 2,
    # --- Healthcare / insurance positive ---
    "vergoed": 2,
    "vergoeding": 1,
    "vergoedt": 2,
    "vergoedingen": 1,
    "dekking": 1,
    "gedekt": 1,
    "korting": 2,
    "kortingen": 2,
    "goedkoper": 2,
    "goedkope": 1,
    "daalt": 1,
    "daling": 1,
    "verlaagd": 2,
    "verlaging": 2,
    "verlagen": 2,
    "bevriezen": 1,
    "bevroren": 1,
    "investering": 1,
    "investeringen": 1,
    "verbetering": 2,
    "verbeteringen": 2,
    "verbeterd": 2,
    "verbeteren": 2,
    "zorgzaam": 2,
    "behandeld": 1,
    "beschikbaar": 1,
    # --- General negative ---
    "slecht": -2,
    "slechte": -2,
    "slechter": -2,
    "slechtst": -3,
    "erg": -1,
    "ergste": -3,
    "vreselijk": -3,
    "vreselijke": -3,
    "verschrikkelijk": -3,
    "rampzalig": -4,
    "ramp": -3,
    "drama": -3,
    "probleem": -2,
    "problemen": -2,
    "zorgen": -1,
    "bezorgd": -2,
    "bezorgdheid": -2,
    "angst": -2,
    "bang": -2,
    "boos": -3,
    "woedend": -4,
    "woede": -3,
    "kritiek": -2,
    "kritisch": -1,
    "klacht": -2,
    "klachten": -2,
    "protest": -2,
    "onvrede": -2,
    "ontevreden": -2,
    "teleurgesteld": -2,
    "teleurstelling": -2,
    "onterecht": -2,
    "oneerlijk": -2,
    "oneerlijke": -2,
    "schandalig": -3,
    "schande": -3,
    "fout": -2,
    "fouten": -2,
    "mislukt": -2,
    "falen": -2,
    "faalt": -2,
    "crisis": -3,
    "chaos": -3,
    "tekort": -2,
    "tekorten": -2,
    "gevaar": -2,
    "gevaarlijk": -3,
    "gevaarlijke": -3,
    "risico": -1,
    "risico's": -1,
    "schade": -2,
    "verlies": -2,
    "verliezen": -2,
    "pijn": -2,
    "ziek": -2,
    "zieke": -1,
    "dood": -3,
    "overleden": -2,
    "sterfte": -2,
    "onzeker": -2,
    "onzekerheid": -2,
    "stress": -2,
    "moeilijk": -1,
    "moeilijke": -1,
    "zwaar": -1,
    "zware": -1,
    "helaas": -2,
    "jammer": -1,
    "waarschuwing": -2,
    "waarschuwt": -2,
    "staking": -2,
    "fraude": -3,
    # --- Healthcare / insurance negative ---
    "duur": -2,
    "dure": -2,
    "duurder": -2,
    "stijgt": -1,
    "stijging": -2,
    "stijgen": -1,
    "verhoging": -2,
    "verhoogd": -2,
    "verhogen": -2,
    "onbetaalbaar": -3,
    "onbetaalbare": -3,
    "wachtlijst": -2,
    "wachtlijsten": -2,
    "wachttijd": -1,
    "wachttijden": -2,
    "bezuiniging": -2,
    "bezuinigingen": -2,
    "bezuinigen": -2,
    "afgewezen": -2,
    "afwijzing": -2,
    "weigert": -2,
    "geweigerd": -2,
    "niet-vergoed": -2,
    "schuld": -2,
    "schulden": -2,
    "betalingsachterstand": -2,
    "wanbetalers": -2,
    "zorgmijden": -2,
    "zorgmijding": -2,
    "zorgkloof": -2,
    "personeelstekort": -3,
    "overbelast": -2,
    "overbelasting": -2,
    "sluiting": -2,
    "gesloten": -1,
    "bureaucratie": -2,
    "administratieve": -1,
    "lastendruk": -2,
}

_NEGATORS = (
    "niet",
    "geen",
    "nooit",
    "nergens",
    "niemand",
    "niets",
    "nee",
    "neen",
    "noch",
    "zonder",
    "n't",
    "'t",
)

LABELS = MappingProxyType(_LABELS)
NEGATORS = frozenset(_NEGATORS)
