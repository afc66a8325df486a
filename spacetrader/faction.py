"""Player factions and the storylines each faction offers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FactionType(Enum):
    """The faction a pilot belongs to."""

    TRADERS = "Traders"
    MINERS = "Miners"
    MILITARY = "Military"
    SCIENTISTS = "Scientists"

    @property
    def display_name(self) -> str:
        """The faction's full name."""
        return _DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        """What the faction focuses on and which starting bonuses it gives."""
        return _DESCRIPTIONS[self]

    def __str__(self) -> str:
        return self.display_name


_DISPLAY_NAMES = {
    FactionType.TRADERS: "United Trade Federation",
    FactionType.MINERS: "Mining Consortium",
    FactionType.MILITARY: "Galactic Security Force",
    FactionType.SCIENTISTS: "Scientific Academy",
}

_DESCRIPTIONS = {
    FactionType.TRADERS: (
        "The United Trade Federation specializes in commerce and profit. Starting bonuses "
        "include better prices at markets and a cargo-focused ship."
    ),
    FactionType.MINERS: (
        "The Mining Consortium focuses on resource extraction. Starting bonuses include "
        "improved mining efficiency and a specialized mining vessel."
    ),
    FactionType.MILITARY: (
        "The Galactic Security Force maintains order in the systems. Starting bonuses "
        "include combat bonuses and a well-armed patrol ship."
    ),
    FactionType.SCIENTISTS: (
        "The Scientific Academy pursues knowledge and discovery. Starting bonuses include "
        "research speed bonuses and an exploration vessel with advanced scanners."
    ),
}


@dataclass
class Storyline:
    """A faction story arc made of ``total_steps`` steps.

    ``starting_skills`` pairs a skill category name with its starting level.
    """

    id: str
    faction: FactionType
    name: str
    description: str
    total_steps: int
    background: str = ""
    starting_skills: list[tuple[str, int]] = field(default_factory=list)
    progress: int = 0
    completed: bool = False

    def advance(self) -> bool:
        """Move one step forward; return False if the storyline is already complete."""
        if self.completed:
            return False
        self.progress += 1
        if self.progress >= self.total_steps:
            self.completed = True
        return True

    def get_progress_percentage(self) -> float:
        if self.total_steps == 0:
            return 0.0
        return self.progress / self.total_steps * 100.0


_STORYLINES: dict[FactionType, tuple[tuple, ...]] = {
    FactionType.TRADERS: (
        (
            "traders_dominance",
            "Market Dominance",
            "Establish a trading empire that controls the galactic economy.",
            "Born into a merchant family, you've spent your life learning the intricacies of "
            "galactic markets. As a shrewd negotiator, your reputation for fair but profitable "
            "deals has spread across several systems. Now, with your own vessel, you aim to "
            "expand your influence and become a market power across the galaxy.",
            10,
            (("Trading", 3), ("Navigation", 2), ("Engineering", 1)),
        ),
        (
            "traders_discovery",
            "Profit Frontiers",
            "Discover new trade routes and exotic goods to maximize profits.",
            "You made your name as an explorer who identified valuable trade opportunities in "
            "unmapped systems. Your earlier expeditions yielded enough profit to acquire your "
            "own ship, and now you seek to find undiscovered resources and establish new trade "
            "routes that will revolutionize the galactic economy.",
            8,
            (("Trading", 2), ("Navigation", 3), ("Research", 1)),
        ),
        (
            "traders_influence",
            "Political Influence",
            "Use your wealth to gain political power and influence galactic policy.",
            "A former advisor to planetary governors, you've witnessed how commerce shapes "
            "politics across the stars. With connections throughout diplomatic circles and a "
            "knack for brokering mutually beneficial agreements, you've acquired your first "
            "ship to begin building a commercial empire with political aspirations.",
            12,
            (("Trading", 3), ("Combat", 1), ("Engineering", 2)),
        ),
    ),
    FactionType.MINERS: (
        (
            "miners_motherlode",
            "The Motherlode",
            "Discover the legendary Motherlode asteroid with untold riches.",
            "Growing up in an asteroid mining colony, you learned to read mineral compositions "
            "like others read books. Your exceptional talent for finding valuable deposits "
            "earned you respect among veteran miners. You've invested everything in your own "
            "mining vessel to seek the fabled Motherlode asteroid that could make you a legend.",
            9,
            (("Mining", 3), ("Engineering", 2), ("Navigation", 1)),
        ),
        (
            "miners_technology",
            "Resource Revolution",
            "Develop revolutionary mining technology to transform the industry.",
            "As a mining engineer with innovative ideas, you've developed prototypes that could "
            "revolutionize resource extraction. After corporate interests tried to steal your "
            "designs, you've struck out on your own with a mining vessel to prove your "
            "technology in the field and change the industry forever.",
            10,
            (("Mining", 2), ("Engineering", 3), ("Research", 1)),
        ),
        (
            "miners_empire",
            "Resource Empire",
            "Control the resource supply chain across multiple star systems.",
            "Once a small-time prospector, you gained notoriety after discovering a rare mineral "
            "vein that funded your first ship purchase. With a keen understanding of supply "
            "chains and resource logistics, you plan to establish mining operations across "
            "multiple systems and control the flow of critical materials throughout the galaxy.",
            11,
            (("Mining", 3), ("Trading", 2), ("Combat", 1)),
        ),
    ),
    FactionType.MILITARY: (
        (
            "military_threat",
            "The Rising Threat",
            "Combat a mysterious alien force threatening galactic security.",
            "As a decorated veteran of the Frontier Wars, you've seen more combat than most. "
            "Recently discharged after reporting unusual activity in the outer systems that "
            "command ignored, you've acquired your own vessel to investigate these anomalies "
            "yourself and protect humanity from what you believe is coming.",
            12,
            (("Combat", 3), ("Navigation", 2), ("Engineering", 1)),
        ),
        (
            "military_peacekeeping",
            "Galactic Peacekeeping",
            "Establish order in lawless regions and fight pirate organizations.",
            "Your career as a military police officer showed you how lawlessness destroys "
            "communities across the frontier. After budget cuts eliminated your peacekeeping "
            "division, you invested your savings in a patrol vessel to continue your mission: "
            "bringing justice to lawless systems and dismantling criminal organizations.",
            10,
            (("Combat", 2), ("Navigation", 2), ("Trading", 2)),
        ),
        (
            "military_supremacy",
            "Military Supremacy",
            "Build the ultimate combat fleet and establish military dominance.",
            "A tactical genius who rose quickly through military ranks, you became frustrated "
            "with political constraints on military operations. Resigning your commission, "
            "you've secured private funding for your own combat vessel - the first of what you "
            "plan to be an elite private fleet capable of outperforming standard military "
            "formations.",
            9,
            (("Combat", 3), ("Engineering", 2), ("Research", 1)),
        ),
    ),
    FactionType.SCIENTISTS: (
        (
            "scientists_discovery",
            "Ancient Discovery",
            "Uncover the mysteries of an ancient alien civilization and their technology.",
            "Your academic career in xenoarchaeology was derailed when you proposed "
            "controversial theories about advanced ancient civilizations. Ridiculed by the "
            "scientific establishment, you've used family inheritance to purchase a research "
            "vessel and prove your theories by finding concrete evidence of these mysterious "
            "precursor species and their advanced technology.",
            11,
            (("Research", 3), ("Navigation", 2), ("Mining", 1)),
        ),
        (
            "scientists_breakthrough",
            "Technological Breakthrough",
            "Achieve a revolutionary breakthrough in FTL travel technology.",
            "A theoretical physicist with radical ideas about space-time manipulation, you've "
            "developed equations that suggest new FTL travel methods are possible. After "
            "research institutions refused to fund your 'impossible' experiments, you've "
            "acquired an explorer vessel to gather data from space anomalies and prove your "
            "revolutionary theories.",
            10,
            (("Research", 3), ("Engineering", 2), ("Navigation", 1)),
        ),
        (
            "scientists_anomaly",
            "The Anomaly",
            "Investigate a spacetime anomaly that could change our understanding of the universe.",
            "As a former government astrophysicist, you detected unusual readings that suggest "
            "a massive spacetime anomaly is developing in a remote sector. When your reports "
            "were classified and research terminated, you resigned in protest. Now with your "
            "own explorer vessel, you're determined to reach and study this phenomenon that "
            "could revolutionize our understanding of physics.",
            12,
            (("Research", 3), ("Navigation", 2), ("Engineering", 1)),
        ),
    ),
}


def get_storylines_for_faction(faction: FactionType) -> list[Storyline]:
    """Return fresh, unstarted copies of the three storylines a faction offers."""
    return [
        Storyline(
            id=story_id,
            faction=faction,
            name=name,
            description=description,
            total_steps=total_steps,
            background=background,
            starting_skills=list(skills),
        )
        for story_id, name, description, background, total_steps, skills in _STORYLINES[faction]
    ]