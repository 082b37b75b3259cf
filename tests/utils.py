from __future__ import annotations

from itertools import islice, product
from string import ascii_lowercase
from typing import List

from writing_band_evaluator.grammar.base import GrammarChecker
from writing_band_evaluator.models import GrammarMatch

TRAFFIC_PROMPT = "Discuss the causes of urban traffic congestion."

RECIPE_PARAGRAPH = (
    "Start by washing three ripe tomatoes and chopping them into small cubes. "
    "Heat olive oil in a wide pan over medium heat, then add sliced onions and a "
    "pinch of salt. Stir gently until the onions turn golden and soft. Add the "
    "tomatoes, crushed garlic and fresh basil, and let the sauce simmer for twenty "
    "minutes while the pasta boils in salted water."
)

# 60 words, on topic, with a position and a conclusion.
SHORT_TRAFFIC_ESSAY = (
    "I believe urban traffic congestion has several causes. Cars crowd narrow "
    "streets every morning, and public transport remains slow and unreliable. "
    "Many commuters therefore drive alone, which worsens congestion in the city "
    "centre. Poor planning also causes delays. Better buses would clearly ease "
    "the problem. In conclusion, urban traffic congestion results from car "
    "dependence, weak transport links and poor planning."
)

TRAFFIC_PARAGRAPHS = [
    "In this essay I will argue that urban traffic congestion has several clear "
    "causes. Many cities have grown faster than their roads, and the number of "
    "private cars keeps rising every year. However, road space alone does not "
    "explain the delays that commuters face each morning. Cities such as London "
    "and Bangkok show how quickly streets fill once cheap parking and wide ring "
    "roads encourage residents to buy a second vehicle for short daily trips.",
    "Firstly, public transport in many cities is slow and unreliable. As a result, "
    "workers prefer to drive, which adds thousands of vehicles to narrow streets. "
    "For example, a single broken train line can push commuters onto the roads "
    "and double journey times across the centre. Buses that share lanes with private "
    "cars are trapped in the same queues, so passengers see little reason to leave "
    "their own vehicles at home during the working week.",
    "Secondly, planning decisions often separate homes from offices. Consequently, "
    "residents must travel long distances, and traffic builds up on the same "
    "routes at the same hours. In addition, delivery vans and taxis compete for "
    "kerb space, which slows the flow even further. Large shopping centres built on the edge "
    "of town also draw weekend crowds along roads that were never designed to "
    "carry such heavy volumes of visitors.",
    "In conclusion, urban traffic congestion is caused by weak public transport, "
    "poor planning and growing car ownership. Therefore, governments should invest "
    "in reliable trains and buses while designing neighbourhoods where people can "
    "live close to where they work.",
]


def recipe_essay(paragraphs: int = 5) -> str:
    """A long essay with no relation to traffic and no linking phrases."""
    return "\n\n".join([RECIPE_PARAGRAPH] * paragraphs)


def traffic_essay() -> str:
    return "\n\n".join(TRAFFIC_PARAGRAPHS)


def repetition_essay(repeated: str = "traffic", repeats: int = 20, total: int = 200) -> str:
    """`total` content tokens where `repeated` appears `repeats` times and the rest once."""
    fillers = ("q" + a + b for a, b in product(ascii_lowercase, repeat=2))
    words: List[str] = list(islice(fillers, total - repeats))
    step = len(words) // repeats
    for idx in range(repeats):
        words.insert(idx * (step + 1), repeated)
    return " ".join(words) + "."


class FakeChecker(GrammarChecker):
    def __init__(self, matches: List[GrammarMatch] | None = None) -> None:
        self.matches = matches or []
        self.calls: List[str] = []

    def check(self, text: str) -> List[GrammarMatch]:
        self.calls.append(text)
        return list(self.matches)


class FailingChecker(GrammarChecker):
    def __init__(self, error: Exception) -> None:
        self.error = error

    def check(self, text: str) -> List[GrammarMatch]:
        raise self.error
