from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator, List, Optional, Tuple, Union

import pandas as pd

from .config import BOT_NAME, COURSE_NAME
from .logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class KnowledgeEntry:
    keywords: FrozenSet[str]
    question: str
    answer: str

    def __post_init__(self):
        if isinstance(self.keywords, str):
            raise ValueError("keywords must be a collection of strings, not a single string")
        keywords = frozenset(str(k).lower() for k in self.keywords)
        if not keywords:
            raise ValueError(f"entry {self.question!r} has no keywords")
        if any(not k.strip() for k in keywords):
            raise ValueError(f"entry {self.question!r} has an empty keyword")
        object.__setattr__(self, "keywords", keywords)

    @property
    def lead_word(self) -> str:
        words = self.question.lower().split()
        return words[0] if words else ""


class KnowledgeBase:
    """Ordered, read-only collection of entries. Order only matters for ties."""

    def __init__(self, entries: Iterable[KnowledgeEntry]):
        self._entries: Tuple[KnowledgeEntry, ...] = tuple(entries)

    def __iter__(self) -> Iterator[KnowledgeEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> KnowledgeEntry:
        return self._entries[index]

    def questions(self) -> List[str]:
        return [e.question for e in self._entries]

    def find(self, question: str) -> Optional[KnowledgeEntry]:
        for entry in self._entries:
            if entry.question == question:
                return entry
        return None


def entry(keywords: Iterable[str], question: str, answer: str) -> KnowledgeEntry:
    return KnowledgeEntry(frozenset(keywords), question, answer)


# =========================
# Course knowledge base
# =========================
# Topic entries come first: on a tie the earlier entry wins, so the broad
# "languages" and "help" entries sit at the end.
COURSE_ENTRIES: List[KnowledgeEntry] = [
    entry(
        ["merge", "join", "combine datasets", "append", "concatenate"],
        "How do I merge or join datasets?",
        "Merging is covered in **Module 2a (Importing from Files)**.\n"
        "• Python: `pd.merge(left, right, on=\"id\", how=\"left\", validate=\"m:1\")`\n"
        "• Stata: `merge m:1 id using other.dta`, then check `_merge`\n"
        "• R: `dplyr::left_join(left, right, by = \"id\")`\n\n"
        "Always check the merge type (1:1, m:1, 1:m) and count unmatched rows afterwards.",
    ),
    entry(
        ["reshape", "wide to long", "long to wide", "pivot", "melt"],
        "How do I reshape data between wide and long?",
        "Reshaping is in **Module 2a**.\n"
        "• Python: `df.melt(...)` (wide → long) and `df.pivot(...)` (long → wide)\n"
        "• Stata: `reshape long gdp, i(country) j(year)`\n"
        "• R: `tidyr::pivot_longer()` / `pivot_wider()`",
    ),
    entry(
        ["import", "read csv", "csv", "excel", "parquet", ".dta", "load data", "load my data"],
        "How do I import data from files?",
        "File import is **Module 2a**.\n"
        "• Python: `pd.read_csv`, `pd.read_excel`, `pd.read_stata`, `pd.read_parquet`\n"
        "• Stata: `import delimited`, `import excel`, `use file.dta`\n"
        "• R: `readr::read_csv`, `readxl::read_excel`, `haven::read_dta`\n\n"
        "Keep raw files read-only and write cleaned versions to a separate folder.",
    ),
    entry(
        ["apis", "api key", "an api", "world bank", "fred", "json", "http request"],
        "What is an API and how do I use one?",
        "APIs are covered in **Module 2b (Working with APIs)**: HTTP requests, JSON responses, "
        "authentication, and real sources like the **World Bank API** and **FRED**.\n"
        "In Python start with `requests.get(url, params=...)` and `response.json()`.",
    ),
    entry(
        ["scrap", "web scraping", "beautifulsoup", "rvest", "selenium", "robots.txt"],
        "How do I scrape data from a website?",
        "Web scraping is **Module 2c**. Check **robots.txt** and the site's Terms of Service first.\n"
        "• Python: `requests` + **BeautifulSoup**, or **Selenium** for JavaScript-heavy pages\n"
        "• R: **rvest**",
    ),
    entry(
        ["summary statistics", "describe", "explore", "first analysis", "inspect"],
        "How do I explore a new dataset?",
        "Data exploration is **Module 3**. Run the \"First Analysis\" script: look at shape, types, "
        "missing counts and summary statistics before anything else.\n"
        "• Python: `df.info()`, `df.describe()`\n"
        "• Stata: `describe`, `summarize`, `codebook`\n"
        "• R: `str(df)`, `summary(df)`",
    ),
    entry(
        ["missing value", "missing data", "outlier", "clean", "duplicates"],
        "How do I handle missing values and outliers?",
        "Data cleaning is **Module 4**: missing values, outliers, strings, dates and validation.\n"
        "Document every cleaning decision; never overwrite the raw data.",
    ),
    entry(
        ["dates", "datetime", "string", "regex"],
        "Working with dates and strings",
        "Dates and strings are part of **Module 4 (Data Cleaning)**.\n"
        "• Python: `pd.to_datetime`, `.str` accessor, `re`\n"
        "• Stata: `date()`, `strtrim()`, `regexm()`\n"
        "• R: **lubridate** and **stringr**",
    ),
    entry(
        ["plot", "graph", "chart", "ggplot", "matplotlib", "visualization", "visualisation", "visualize"],
        "How do I make plots and charts?",
        "Visualization is in **Module 5 (Data Analysis)**.\n"
        "• Python: **matplotlib** / **seaborn**\n"
        "• Stata: `twoway`, `graph export`\n"
        "• R: **ggplot2**",
    ),
    entry(
        ["hypothesis test", "t-test", "p-value", "significance"],
        "How do I run a hypothesis test?",
        "Hypothesis testing is in **Module 5**. Be clear about the null, the test statistic and what the "
        "p-value does (and does not) tell you.",
    ),
    entry(
        ["regression", "linear regression", "ordinary least squares", "coefficient"],
        "Running a regression (OLS)",
        "OLS and estimation are **Module 7**.\n"
        "• Python: `statsmodels.formula.api.ols(\"y ~ x\", data=df).fit()`\n"
        "• Stata: `reg y x, robust`\n"
        "• R: `lm(y ~ x, data = df)` or `fixest::feols`",
    ),
    entry(
        ["difference in differences", "difference-in-differences", "diff-in-diff", "parallel trends", "event study"],
        "What is difference-in-differences?",
        "**Difference-in-Differences (DiD)** is covered in **Module 6**. It compares changes over time "
        "between treated and control groups and relies on the **parallel trends** assumption. "
        "Implementations are provided in Python, Stata and R.",
    ),
    entry(
        ["instrumental variable", "2sls", "two-stage least squares", "ivreg", "endogeneity", "exclusion restriction"],
        "What are instrumental variables?",
        "**Instrumental Variables (IV)** address endogeneity when you have a valid instrument: relevant "
        "and satisfying the exclusion restriction. See **Module 6** for theory and code in all three languages.",
    ),
    entry(
        ["regression discontinuity", "rdd", "cutoff", "running variable"],
        "What is regression discontinuity?",
        "**Regression Discontinuity Design (RDD)** exploits a sharp cutoff in treatment assignment. "
        "**Module 6** covers sharp and fuzzy RDD with code examples.",
    ),
    entry(
        ["fixed effect", "cluster", "robust standard error", "standard errors", "panel data"],
        "Fixed effects and clustered standard errors",
        "Fixed effects, clustering and robust standard errors are **Module 7 (Estimation Methods)**.\n"
        "• Stata: `reghdfe y x, absorb(id year) vce(cluster id)`\n"
        "• R: `fixest::feols(y ~ x | id + year, cluster = ~id)`\n"
        "• Python: **linearmodels** `PanelOLS`",
    ),
    entry(
        ["virtual environment", "venv", "conda", "pip install", "install"],
        "How do I set up my environment?",
        "Setup is **Module 1 (Getting Started)**: create a virtual environment "
        "(`python -m venv .venv` or conda), install packages, and write your first script.",
    ),
    entry(
        ["git", "github", "commit", "branch", "pull request", "version control"],
        "How do I use Git and GitHub?",
        "Git and GitHub are **Module 9**: commits, branches, pull requests and collaboration. "
        "Every research project should be under version control!",
    ),
    entry(
        ["replication", "replicability", "reproducible", "reproducibility", "folder structure", "readme"],
        "How do I make my research replicable?",
        "Replicability is **Module 8**: project organization, documentation standards and building a "
        "professional replication package with a clear **README**.",
    ),
    entry(
        ["nlp", "natural language", "tf-idf", "tokeniz", "bag of words", "text analysis", "embedding"],
        "What does the NLP module cover?",
        "**Module 10 (History of NLP)** walks from tokenization and bag of words through TF-IDF to embeddings.",
    ),
    entry(
        ["machine learning", "cross-validation", "cross validation", "regularization", "lasso", "random forest", "overfitting"],
        "What does the machine learning module cover?",
        "**Module 11 (Machine Learning)**: supervised learning, train/test splits, cross-validation, "
        "regularization (lasso, ridge) and tree-based methods.",
    ),
    entry(
        ["llm", "large language model", "prompt engineering", "chatgpt", "transformer"],
        "What does the LLM module cover?",
        "**Module 12 (Large Language Models)**: transformers, prompt engineering, fine-tuning and calling LLM APIs.",
    ),
    entry(
        ["research project", "climate", "vulnerability", "final project"],
        "What is the course research project?",
        "Throughout the course you build a project on **Climate Vulnerability and Economic Growth** "
        "using World Bank data, applying each module's tools as you go.",
    ),
    entry(
        ["python", "stata", "rstudio", "which language", "programming language"],
        "Which language should I use: Python, Stata or R?",
        "**Module 0 (Languages & Platforms)** compares them. Stata is standard in applied economics, "
        "R shines at statistics and **ggplot2**, and Python is the most versatile for data science and ML. "
        "Code is shown in all three throughout the course.",
    ),
    entry(
        ["help", "what can you do", "modules", "syllabus", "course structure"],
        "What can you help me with?",
        "I can help with:\n"
        "• **Importing, merging and reshaping data** (Module 2)\n"
        "• **Exploration and cleaning** (Modules 3–4)\n"
        "• **Analysis and visualization** (Module 5)\n"
        "• **Causal inference: DiD, IV, RDD** (Module 6)\n"
        "• **Regression, fixed effects, clustering** (Module 7)\n"
        "• **Replicability and Git** (Modules 8–9)\n"
        "• **NLP, machine learning and LLMs** (Modules 10–12)\n\n"
        "What would you like to ask?",
    ),
    # Small talk. Kept last so topic entries win any tie.
    entry(
        ["hello", "good morning", "good afternoon", "good evening", "greetings"],
        "Hello",
        f"Hi! I'm the {BOT_NAME} for {COURSE_NAME}. Ask me about any module, "
        "e.g. merging data, difference-in-differences, fixed effects or Git.",
    ),
    entry(
        ["thank", "thx", "cheers"],
        "Thank you",
        "You're welcome! Anything else about the course?",
    ),
]


def default_knowledge_base() -> KnowledgeBase:
    return KnowledgeBase(COURSE_ENTRIES)


# =========================
# Load entries from a spreadsheet
# =========================
KB_COLUMNS = {
    "keywords": "keywords",
    "question": "question",
    "answer": "answer",
}


def load_knowledge_base(path: Union[str, Path]) -> Optional[KnowledgeBase]:
    path = Path(path)
    try:
        if path.suffix.lower() == ".csv":
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        else:
            df = pd.read_excel(path, sheet_name=0, engine="openpyxl", dtype=str)
        df.columns = [str(c).strip().lower() for c in df.columns]

        if any(col not in df.columns for col in KB_COLUMNS.values()):
            logger.warning("knowledge_base_columns_missing", path=str(path), columns=list(df.columns))
            return None

        df = df.fillna("")
        for col in KB_COLUMNS.values():
            df[col] = df[col].astype(str).str.strip()
        df = df[(df[KB_COLUMNS["keywords"]] != "") & (df[KB_COLUMNS["answer"]] != "")]

        entries = []
        for _, row in df.iterrows():
            keywords = [k.strip() for k in row[KB_COLUMNS["keywords"]].split(",") if k.strip()]
            entries.append(entry(keywords, row[KB_COLUMNS["question"]], row[KB_COLUMNS["answer"]]))
    except Exception as exc:
        logger.warning("knowledge_base_load_failed", path=str(path), error=str(exc))
        return None

    logger.info("knowledge_base_loaded", path=str(path), entries=len(entries))
    return KnowledgeBase(entries)
