import sys
from pathlib import Path
from typing import List

import pytest

# Repo root on sys.path so "examtex.*" imports work when running pytest at repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from examtex.common import TraceEvent


@pytest.fixture
def events() -> List[TraceEvent]:
    """A list that collects trace events; pass events.append as the observer."""
    return []


@pytest.fixture
def default_paper() -> str:
    """The paper layout the generator asks the model to produce."""
    return r"""\documentclass[12pt,a4paper]{article}
\usepackage{amsmath}
\begin{document}
\begin{center}
{\Large \textbf{EXAMINATION PAPER}}\\[0.3cm]
\end{center}
\noindent\fbox{\parbox{\dimexpr\textwidth-2\fboxsep-2\fboxrule}{
\textbf{INSTRUCTIONS TO CANDIDATES:}\\[0.2cm]
\begin{itemize}[leftmargin=*, itemsep=0pt]
\item Read all questions carefully before attempting.
\end{itemize}
}}
\section*{QUESTIONS}

\subsection*{Question 1 [2 marks]}
What is $2 + 2$?

\subsection*{Solution}
$2 + 2 = 4$.

\vspace{0.5cm}

\subsection*{Question 2 [3 marks]}
Solve $x^2 = 9$ for positive $x$.

\subsection*{Solution}
$x = 3$.

\vspace{0.5cm}

\subsection*{Question 3 [5 marks]}
Prove that $\sqrt{2}$ is irrational.

\subsection*{Solution}
Assume $\sqrt{2} = p/q$ in lowest terms; then $p^2 = 2q^2$, a contradiction.

\vspace{0.5cm}
\end{document}
"""
