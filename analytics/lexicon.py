"""
Closed word lists used by the analytics engine and the text normalizer.

All entries are lowercase; multi-word entries are matched with flexible
internal whitespace.
"""

# Always fillers, wherever they appear
PURE_FILLER_SOUNDS = ["um", "uh", "ah", "er", "eh", "hmm", "mm", "mhm", "uhm"]

# Legitimate in moderation, fillers when overused
DISCOURSE_MARKERS = ["well", "okay", "right", "now", "alright", "yeah"]
HEDGE_WORDS = ["basically", "actually", "literally", "totally", "really"]

CONFIDENCE_WORDS = [
    "definitely", "certainly", "absolutely", "clearly", "obviously",
    "without doubt", "undoubtedly", "precisely", "exactly", "specifically",
    "conclusively", "positively", "unquestionably", "confident", "sure",
    "convinced", "guarantee", "promise", "assure", "affirm",
]

UNCERTAINTY_WORDS = [
    "maybe", "perhaps", "possibly", "might", "could be",
    "i think", "i believe", "i guess", "probably", "likely",
    "seems like", "appears to", "i suppose", "presumably", "apparently",
    "unsure", "uncertain", "not sure", "hard to say", "difficult to tell",
]

# Hesitations and pronouns that mark "like" as a stall rather than a comparison
LIKE_FOLLOWERS = [
    "um", "uh", "ah", "er", "so", "and", "i", "you", "we", "they",
    "it", "this", "that", "when", "where", "what",
]
SO_PRECEDERS = ["um", "uh", "ah", "er", "like", "yeah", "well", "okay"]
SO_FOLLOWERS = ["um", "uh", "ah", "er", "like", "yeah"]
SORT_OF_COMPARISONS = ["like", "similar", "the same"]
KIND_OF_COMPARISONS = ["like", "similar", "the same", "person", "thing"]

STALLING_PHRASES = ["let me think", "how do i say", "what do you call it"]
