"""
Curated vocabularies and patterns used by the local text-analysis pipeline.

Every table here is module-level and immutable so the extraction strategies
stay pure functions of (text, table).  Tune the lists here without touching
the logic in text_cleaner / fingerprint / keyword_extractor / sentiment.
"""
from __future__ import annotations

import re
from typing import Dict, FrozenSet, Pattern, Tuple

# ---------------------------------------------------------------------------
# Boilerplate removal (context cleaner)
# ---------------------------------------------------------------------------

# Reference section heading through end of text
REFERENCES_SECTION: Pattern[str] = re.compile(
    r"(?:^|\n)[ \t]*(?:\d+\.?[ \t]*)?"
    r"(?:references|bibliography|works cited|literature cited|sources)"
    r"[ \t]*(?::|\n|$)[\s\S]*$",
    re.IGNORECASE,
)

BOILERPLATE_LINES: Tuple[Pattern[str], ...] = (
    # copyright / licensing
    re.compile(
        r"^.*(?:©|\(c\)\s*\d{4}|\bcopyright\b|\bcreative commons\b|\bcc[ -]by\b"
        r"|\ball rights reserved\b).*$",
        re.IGNORECASE | re.MULTILINE,
    ),
    # acknowledgments / funding / affiliations
    re.compile(
        r"^.*\b(?:acknowledge?ments?|funding|funded by|grant (?:no|number)"
        r"|affiliations?|corresponding author)\b.*$",
        re.IGNORECASE | re.MULTILINE,
    ),
    # keyword / index-term / submission metadata
    re.compile(
        r"^[ \t]*(?:keywords|key words|index terms|received|accepted|published online)"
        r"[ \t]*[:—-].*$",
        re.IGNORECASE | re.MULTILINE,
    ),
    # standalone page numbers
    re.compile(r"^[ \t]*\d{1,4}[ \t]*$", re.MULTILINE),
    # "Page 3", "Page 3 of 12", "[Page 3]"
    re.compile(
        r"^[ \t]*\[?page\s+\d+(?:\s+of\s+\d+)?\]?[ \t]*$",
        re.IGNORECASE | re.MULTILINE,
    ),
    # legal disclaimers
    re.compile(
        r"^.*\b(?:disclaimer|terms of use|for personal use only|not for distribution"
        r"|licensed under)\b.*$",
        re.IGNORECASE | re.MULTILINE,
    ),
)

# ---------------------------------------------------------------------------
# Fingerprint
# ---------------------------------------------------------------------------

SECTION_LABELS: Dict[str, str] = {
    "abstract": r"abstract|summary",
    "introduction": r"introduction|background",
    "methodology": r"methodology|methods?|materials and methods|approach",
    "results": r"results|findings|experiments",
    "discussion": r"discussion",
    "conclusion": r"conclusions?|concluding remarks",
}

# A short capitalised line (optionally numbered) that starts the next section
HEADING_LOOKAHEAD = (
    r"(?=\n[ \t]*(?:\d+(?:\.\d+)*\.?[ \t]+|[IVX]+\.[ \t]+)?"
    r"[A-Z][A-Za-z0-9&\-]*(?:[ \t]+[A-Za-z0-9&\-]+){0,5}[ \t]*:?[ \t]*(?:\n|$)|\Z)"
)

WORD_TOKEN: Pattern[str] = re.compile(r"\b[a-zA-Z]{3,}\b")
IMPORTANCE_TOKEN: Pattern[str] = re.compile(r"\b[a-zA-Z]{4,}\b")

ACRONYM: Pattern[str] = re.compile(r"\b[A-Z]{2,6}\b")
TECHNICAL_SUFFIX: Pattern[str] = re.compile(
    r"\b\w*(?:ology|ism|tion|sion|ment|ness|ity|ive|ical|able|ible|graphy|metry"
    r"|nomy|pathy|phobia|philia|ization|ification)\b",
    re.IGNORECASE,
)
ALPHANUMERIC: Pattern[str] = re.compile(r"\b(?=\w*[A-Za-z])(?=\w*\d)\w+\b")
COMPOUND: Pattern[str] = re.compile(r"\b\w+(?:[-_]\w+)+\b")

SEMANTIC_CLUSTERS: Dict[str, Tuple[str, ...]] = {
    "research-methodology": (
        "methodology", "experiment", "hypothesis", "survey", "sample",
        "participants", "variable", "design", "procedure", "protocol",
    ),
    "technical-implementation": (
        "implementation", "architecture", "framework", "system", "module",
        "interface", "algorithm", "pipeline", "deployment", "infrastructure",
    ),
    "statistical-analysis": (
        "regression", "correlation", "variance", "significance", "distribution",
        "deviation", "probability", "estimate", "confidence", "statistical",
    ),
    "machine-learning": (
        "neural", "network", "training", "model", "learning",
        "classification", "dataset", "features", "supervised", "accuracy",
    ),
    "performance-evaluation": (
        "performance", "evaluation", "benchmark", "accuracy", "precision",
        "recall", "efficiency", "latency", "throughput", "baseline",
    ),
}

DOMAIN_PATTERNS: Dict[str, Pattern[str]] = {
    "Computer Science": re.compile(
        r"\b(?:algorithms?|software|comput\w*|networks?|databases?|programming"
        r"|neural|machine learning|artificial intelligence)\b",
        re.IGNORECASE,
    ),
    "Medicine/Biology": re.compile(
        r"\b(?:patients?|clinical|diseases?|treatments?|medical|cells?|genes?"
        r"|genetic\w*|proteins?|biolog\w*|diagnos\w*)\b",
        re.IGNORECASE,
    ),
    "Psychology": re.compile(
        r"\b(?:cognitive|behaviou?r\w*|psycholog\w*|emotion\w*|mental|perception"
        r"|anxiety|memory)\b",
        re.IGNORECASE,
    ),
    "Economics": re.compile(
        r"\b(?:econom\w*|markets?|financ\w*|prices?|inflation|gdp|monetary|fiscal"
        r"|investments?|trade)\b",
        re.IGNORECASE,
    ),
    "Physics": re.compile(
        r"\b(?:quantum|particles?|energy|physic\w*|electro\w*|magnetic|velocity"
        r"|momentum|thermodynamic\w*|photons?)\b",
        re.IGNORECASE,
    ),
}

# A domain is reported only above this many pattern matches
DOMAIN_MIN_MATCHES = 3

# ---------------------------------------------------------------------------
# Keyword extraction
# ---------------------------------------------------------------------------

STOP_WORDS: FrozenSet[str] = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "any", "can",
    "had", "her", "was", "one", "our", "out", "has", "him", "his", "how",
    "its", "may", "new", "now", "old", "see", "two", "way", "who", "did",
    "get", "let", "put", "say", "she", "too", "use", "uses", "used", "using",
    "this", "that", "these", "those", "with", "from", "have", "been", "were",
    "will", "would", "could", "should", "there", "their", "them", "they",
    "then", "than", "what", "when", "where", "which", "while", "also",
    "into", "onto", "such", "some", "more", "most", "other", "only", "over",
    "very", "each", "both", "between", "after", "before", "about", "above",
    "under", "because", "through", "during", "however", "therefore", "thus",
    "here", "just", "like", "many", "much", "well", "even", "does", "being",
    "within", "without", "among", "based", "shown", "show", "shows", "table",
    "figure", "section", "paper", "page", "study", "work", "first", "second",
    "third", "et", "al", "etc", "via", "per", "able", "given", "make", "made",
    "further", "various", "several", "same", "different", "following",
})

TECHNICAL_TERM_PATTERNS: Tuple[Tuple[Pattern[str], float], ...] = (
    (ACRONYM, 0.9),
    (TECHNICAL_SUFFIX, 0.8),
    (ALPHANUMERIC, 0.7),
    (COMPOUND, 0.6),
)

FREQUENT_TERM_MIN_COUNT = 3
CROSS_SECTION_MIN_SECTIONS = 2

FIXED_VOCABULARY: Tuple[str, ...] = (
    "algorithm", "neural network", "machine learning", "deep learning",
    "regression", "classification", "clustering", "hypothesis", "correlation",
    "significance", "p-value", "confidence interval", "effect size",
    "sample size", "meta-analysis", "systematic review", "randomized",
    "cohort", "validation", "reproducibility", "methodology", "empirical",
    "quantitative", "qualitative", "longitudinal",
)

# (phrases, weight)
CURATED_PHRASES: Tuple[Tuple[Tuple[str, ...], float], ...] = (
    ((
        "machine learning", "deep learning", "neural network",
        "natural language processing", "computer vision", "reinforcement learning",
        "gradient descent", "feature extraction", "data mining",
        "artificial intelligence", "cloud computing", "big data",
    ), 0.9),
    ((
        "clinical trial", "randomized controlled trial", "public health",
        "risk factor", "blood pressure", "immune response", "gene expression",
        "side effects",
    ), 0.8),
    ((
        "literature review", "case study", "research question",
        "theoretical framework", "empirical evidence", "data collection",
        "statistical analysis", "qualitative research", "future work",
    ), 0.6),
)

STOP_PHRASES: FrozenSet[str] = frozenset({
    "in this paper", "in this study", "this paper", "this study", "we propose",
    "we present", "we show", "as well as", "such as", "in order to",
    "on the other hand", "the other hand", "at the same time", "in addition",
    "results show", "the results", "in the", "of the", "to the", "and the",
    "et al", "for example", "for instance", "based on", "due to",
})

NGRAM_MIN_COUNT = 2

# Used by the simple pattern detector when nothing technical was found
COMMON_IMPORTANT_WORDS: Tuple[str, ...] = (
    "research", "study", "analysis", "method", "approach", "technique", "system",
    "process", "function", "variable", "parameter", "model", "theory", "concept",
    "principle", "application", "implementation", "evaluation", "assessment",
    "measurement", "calculation", "computation", "processing", "transformation",
    "extraction", "classification", "prediction", "forecasting", "modeling",
    "simulation", "optimization", "estimation", "validation", "verification",
    "testing", "benchmarking", "comparison", "synthesis", "integration",
    "efficiency", "performance", "accuracy", "precision", "recall",
    "sensitivity", "specificity", "robustness", "scalability", "reliability",
    "validity", "reproducibility", "algorithm", "neural", "network", "machine",
    "learning", "artificial", "intelligence", "data", "statistical",
    "regression", "clustering", "deep", "reinforcement", "supervised",
    "unsupervised",
)

DOMAIN_TERMS: Pattern[str] = re.compile(
    r"\b(?:algorithm|neural|network|machine|learning|artificial|intelligence|data"
    r"|analysis|statistical|model|optimization|regression|classification|clustering"
    r"|deep|reinforcement|supervised|unsupervised|experiment|method|technique"
    r"|framework|hypothesis|theory|correlation|coefficient|parameter|variable"
    r"|evaluation|validation|accuracy|precision|recall|sensitivity|specificity"
    r"|robustness|scalability|reliability|reproducibility|methodology|empirical"
    r"|quantitative|qualitative|longitudinal|randomized|cohort|placebo|bias)\b",
    re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------

DEFINITION_VERBS = r"is|are|refers to|means|denotes|describes|represents"

# ---------------------------------------------------------------------------
# Sentiment
# ---------------------------------------------------------------------------

POSITIVE_WORDS: Tuple[str, ...] = (
    "excellent", "great", "good", "positive", "successful", "effective",
    "improved", "better", "outstanding", "remarkable", "significant",
    "promising", "beneficial", "valuable", "useful", "achievement", "progress",
    "advancement", "innovation", "breakthrough", "solution",
)

NEGATIVE_WORDS: Tuple[str, ...] = (
    "poor", "bad", "negative", "failed", "problem", "issue", "difficult",
    "challenge", "limitation", "weakness", "deficiency", "error", "mistake",
    "concern", "risk", "failure", "decline", "reduction", "worse",
    "inadequate", "insufficient",
)

NEUTRAL_WORDS: Tuple[str, ...] = (
    "analysis", "study", "research", "method", "approach", "technique",
    "process", "data", "result", "finding", "conclusion", "observation",
    "measurement",
)

EMOTIONAL_TONES: Dict[str, str] = {
    "positive": "optimistic and constructive",
    "negative": "critical and analytical",
    "mixed": "balanced and objective",
    "neutral": "professional and neutral",
}

# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

# (marker, marker, label) checked in order; first pair fully present wins
DOCUMENT_TYPE_MARKERS: Tuple[Tuple[str, str, str], ...] = (
    ("abstract", "methodology", "Research Paper"),
    ("introduction", "conclusion", "Academic Article"),
    ("step", "procedure", "Technical Manual"),
    ("analysis", "data", "Analytical Report"),
)
DEFAULT_DOCUMENT_TYPE = "Document"

WORDS_PER_MINUTE = 200

# ---------------------------------------------------------------------------
# Term lookup
# ---------------------------------------------------------------------------

# Checked exact first, then by substring in either direction, in this order
COMMON_DEFINITIONS: Dict[str, str] = {
    "research": (
        "is a systematic investigation to establish facts or principles. It involves "
        "gathering information, analyzing data, and drawing conclusions to advance "
        "knowledge in a particular field."
    ),
    "analysis": (
        "is the detailed examination of the elements or structure of something. It "
        "involves breaking down complex information into smaller parts to understand "
        "how they work together."
    ),
    "method": (
        "refers to a particular procedure for accomplishing something. In research, it "
        "describes the systematic approach used to conduct studies and gather data."
    ),
    "algorithm": (
        "is a step-by-step procedure for solving a problem or completing a task. In "
        "computer science, algorithms are fundamental to programming and data processing."
    ),
    "neural network": (
        "is a computing system inspired by biological neural networks. It consists of "
        "interconnected nodes that process information and can learn from data."
    ),
    "machine learning": (
        "is a subset of artificial intelligence that focuses on algorithms that can "
        "learn and improve from experience without being explicitly programmed."
    ),
    "artificial intelligence": (
        "refers to the simulation of human intelligence in machines. It encompasses "
        "techniques including machine learning, natural language processing and "
        "computer vision."
    ),
    "data": (
        "refers to facts, statistics, or information used for analysis or reasoning. "
        "In research, data is collected through various methods and analyzed to draw "
        "conclusions."
    ),
    "model": (
        "is a simplified representation of a system or process. In research, models "
        "help explain complex phenomena and make predictions."
    ),
    "statistical": (
        "relates to statistics, the science of collecting, analyzing, and interpreting "
        "numerical data to make informed decisions."
    ),
    "classification": (
        "is the process of organizing data into categories based on shared "
        "characteristics. It is commonly used in machine learning and data analysis."
    ),
    "optimization": (
        "is the process of finding the best solution or making something as effective "
        "as possible by maximizing or minimizing specific objectives."
    ),
    "experiment": (
        "is a scientific procedure undertaken to test a hypothesis or demonstrate a "
        "known fact under controlled conditions with systematic observation."
    ),
    "hypothesis": (
        "is a proposed explanation for a phenomenon that can be tested through "
        "experimentation or observation."
    ),
    "theory": (
        "is a well-substantiated explanation of some aspect of the natural world that "
        "has been repeatedly tested and confirmed through observation and experimentation."
    ),
    "methodology": (
        "refers to the systematic approach used to conduct research. It includes the "
        "methods, techniques, and procedures employed in a study."
    ),
    "evaluation": (
        "is the systematic assessment of the value, worth, or quality of something. It "
        "involves gathering evidence and making judgments."
    ),
    "performance": (
        "refers to how well something functions or operates. In research, it often "
        "relates to the effectiveness of algorithms, systems, or methods."
    ),
    "accuracy": (
        "is the degree to which a measurement, calculation, or specification conforms "
        "to the correct value or standard."
    ),
    "precision": (
        "refers to the degree of exactness in measurement or calculation. It indicates "
        "how consistent results are when repeated."
    ),
}

ACRONYM_TERM: Pattern[str] = re.compile(r"^[A-Z]{2,6}$")

# ---------------------------------------------------------------------------
# Passage summary
# ---------------------------------------------------------------------------

RESEARCH_PATTERN: Pattern[str] = re.compile(
    r"\b(?:research|study|experiment|method|analysis|data|results|findings"
    r"|hypothesis|statistical)\b",
    re.IGNORECASE,
)

# (kind, pattern) checked in order; first match describes the passage
PASSAGE_KINDS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("definition", re.compile(
        r"\b(?:is|are|refers to|means|denotes|represents|defined as)\b", re.IGNORECASE
    )),
    ("explanation", re.compile(
        r"\b(?:because|since|therefore|thus|hence|consequently|as a result)\b",
        re.IGNORECASE,
    )),
    ("comparison", re.compile(
        r"\b(?:compared to|versus|vs|unlike|similar to|different from)\b", re.IGNORECASE
    )),
    ("process", re.compile(
        r"\b(?:first|then|next|finally|steps?|process|procedure|method)\b", re.IGNORECASE
    )),
    ("result", re.compile(
        r"\b(?:results?|outcomes?|findings?|conclusions?|shows|demonstrates|indicates)\b",
        re.IGNORECASE,
    )),
)

# (section type, pattern) checked in order against the surrounding context
CONTEXT_SECTION_TYPES: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("introduction", re.compile(r"abstract|introduction|background", re.IGNORECASE)),
    ("methodology", re.compile(r"method|procedure|technique|approach", re.IGNORECASE)),
    ("results", re.compile(r"result|finding|outcome|data", re.IGNORECASE)),
    ("discussion", re.compile(r"discussion|analysis|interpretation", re.IGNORECASE)),
    ("conclusion", re.compile(r"conclusion|summary|implication", re.IGNORECASE)),
)

# ---------------------------------------------------------------------------
# Document chat
# ---------------------------------------------------------------------------

CHAT_COMMON_WORDS: FrozenSet[str] = frozenset({
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "is", "are", "was", "were", "be", "been", "have", "has", "had", "do", "does",
    "did", "will", "would", "could", "should", "may", "might", "can", "this",
    "that", "these", "those", "a", "an",
})

CHAT_IMPORTANT_WORDS_LIMIT = 20
