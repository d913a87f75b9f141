"""Bookkeeping for the reactive-dashboard chapter."""
import pandas as pd
import streamlit as st


class RecomputeCounter:
    """Counts how many times each conductor body actually executed in this session.

    A conductor is a ``st.cache_data`` function; calling ``hit(name)`` as the
    first line of its body means the count only moves on a cache miss, i.e.
    when one of its inputs changed. The cache is shared by every session while
    the counts are not, so a result another session already computed is a hit here.
    """

    def __init__(self, state=None, key="recompute_counts"):
        self._state = st.session_state if state is None else state
        self._key = key
        if key not in self._state:
            self._state[key] = {}

    @property
    def counts(self):
        return self._state[self._key]

    def hit(self, name):
        self.counts[name] = self.counts.get(name, 0) + 1
        return self.counts[name]

    def count(self, name):
        return self.counts.get(name, 0)

    def reset(self):
        self._state[self._key] = {}

    def as_frame(self):
        return pd.DataFrame(
            sorted(self.counts.items()), columns=["conductor", "recomputations"],
        )
