"""
Dependent mandal/village selection for the project form.

LocationSelector holds the state behind the two cascading dropdowns: the
mandal filter and choice, the village filter and choice, the manual-entry
mode, and the plain text fallback used when no mapping is available.
"""

from typing import Dict, List, Optional

from .reconciler import LocationMapping
from .suggestions import VillageSuggester
from ..utils.data_utils import contains_ignore_case


# Dropdown value that switches the form to manual entry
OTHER_OPTION = "__other__"


class LocationSelector:
    """
    Form state for the village and mandal fields.

    ``village`` and ``mandal`` are the values the form submits. In dropdown
    mode they are set by ``select_mandal``/``select_village``; in manual mode
    they mirror the manual text fields; with an empty mapping they are edited
    directly as free text.
    """

    def __init__(self, mapping: Optional[LocationMapping] = None,
                 mandal_filter_min_chars: int = 2,
                 village_filter_min_chars: int = 3,
                 suggester: Optional[VillageSuggester] = None):
        """
        Initialize the selector.

        Args:
            mapping: Village/mandal mapping backing the dropdowns
            mandal_filter_min_chars: Characters needed before the mandal filter applies
            village_filter_min_chars: Characters needed before the village filter applies
            suggester: Optional fuzzy suggester used when the village filter matches nothing
        """
        self.mapping = mapping if mapping is not None else LocationMapping()
        self.mandal_filter_min_chars = mandal_filter_min_chars
        self.village_filter_min_chars = village_filter_min_chars
        self.suggester = suggester or VillageSuggester()

        self.village = ""
        self.mandal = ""
        self.mandal_filter = ""
        self.village_filter = ""
        self.manual_mode = False
        self.manual_village = ""
        self.manual_mandal = ""

    @classmethod
    def from_config(cls, mapping: LocationMapping, config) -> 'LocationSelector':
        """Build a selector with thresholds taken from a TrackerConfig."""
        return cls(
            mapping,
            mandal_filter_min_chars=config.mandal_filter_min_chars,
            village_filter_min_chars=config.village_filter_min_chars,
            suggester=VillageSuggester(
                limit=config.suggestion_limit,
                score_cutoff=config.suggestion_score_cutoff
            )
        )

    def replace_mapping(self, mapping: LocationMapping):
        """Swap in a new mapping (e.g. once the remote override arrives); selections are kept."""
        self.mapping = mapping

    def load_values(self, village: Optional[str], mandal: Optional[str]):
        """Populate the fields from a stored project when editing."""
        self.village = village or ""
        self.mandal = mandal or ""

    @property
    def is_free_text(self) -> bool:
        """True when there is no mapping and both fields are plain inputs."""
        return self.mapping.is_empty()

    @property
    def selected_mandal(self) -> str:
        return self.mandal.strip()

    # Filters

    def set_mandal_filter(self, text: str):
        self.mandal_filter = text or ""

    def set_village_filter(self, text: str):
        self.village_filter = text or ""

    def mandal_options(self) -> List[str]:
        """Mandals offered by the mandal dropdown."""
        mandals = self.mapping.mandals()
        query = self.mandal_filter.strip()
        if len(query) >= self.mandal_filter_min_chars:
            return [m for m in mandals if contains_ignore_case(m, query)]
        return mandals

    def _village_candidates(self) -> List[str]:
        return self.mapping.villages(self.selected_mandal or None)

    def village_options(self) -> List[str]:
        """
        Villages offered by the village dropdown.

        A filter of at least ``village_filter_min_chars`` narrows the candidates;
        below that, the list is empty unless a mandal is selected.
        """
        candidates = self._village_candidates()
        query = self.village_filter.strip()
        if len(query) >= self.village_filter_min_chars:
            return [v for v in candidates if contains_ignore_case(v, query)]
        if self.selected_mandal:
            return candidates
        return []

    @property
    def show_no_match_hint(self) -> bool:
        """True when an active village filter matches nothing."""
        return (len(self.village_filter.strip()) >= self.village_filter_min_chars
                and not self.village_options())

    def village_suggestions(self) -> List[str]:
        """Fuzzy matches for the village filter when it matches nothing."""
        if not self.show_no_match_hint:
            return []
        return self.suggester.suggest(self.village_filter, self._village_candidates())

    # Dropdown choices

    def select_mandal(self, mandal: str):
        """
        Choose a mandal from the dropdown.

        Clears the chosen village and the village filter. Choosing the "Other"
        option switches to manual entry.
        """
        if mandal == OTHER_OPTION:
            self.enter_manual_mode()
            return

        self.mandal = mandal or ""
        self.village = ""
        self.village_filter = ""
        self.manual_mode = False

    def select_village(self, village: str):
        """
        Choose a village from the dropdown and fill in its mandal.

        Choosing the "Other" option switches to manual entry.
        """
        if village == OTHER_OPTION:
            self.enter_manual_mode()
            return

        self.village = village or ""
        self.mandal = (self.mapping.mandal_for(self.village) or "") if self.village else ""
        self.manual_mode = False

    def set_mandal_field(self, mandal: str):
        """Set the mandal value directly; the village is left as it is."""
        self.mandal = mandal or ""

    # Manual entry

    def enter_manual_mode(self):
        """Switch to manual entry, clearing dropdown selections and manual text."""
        self.manual_mode = True
        self.village = ""
        self.mandal = ""
        self.manual_village = ""
        self.manual_mandal = ""

    def set_manual_village(self, text: str):
        self.manual_village = text or ""
        self.village = self.manual_village

    def set_manual_mandal(self, text: str):
        self.manual_mandal = text or ""
        self.mandal = self.manual_mandal

    def cancel_manual_mode(self):
        """
        Leave manual entry.

        The typed text is dropped and so are the village and mandal values it
        filled in; no earlier dropdown selection comes back.
        """
        self.manual_mode = False
        self.manual_village = ""
        self.manual_mandal = ""
        self.village = ""
        self.mandal = ""

    # Free-text fallback

    def set_village_text(self, text: str):
        self.village = text or ""

    def set_mandal_text(self, text: str):
        self.mandal = text or ""

    def on_village_blur(self):
        """Fill in the mandal when the typed village matches a known village exactly."""
        if not self.village:
            return
        mandal = self.mapping.mandal_for(self.village)
        if mandal:
            self.mandal = mandal

    def values(self) -> Dict[str, str]:
        """The village and mandal the form would submit."""
        return {'village': self.village, 'mandal': self.mandal}
