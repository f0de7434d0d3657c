"""Tally charts."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


def sorted_tally(tally: Mapping[str, int]) -> list[tuple[str, int]]:
    """Candidates by count descending, then by name."""
    return sorted(tally.items(), key=lambda item: (-item[1], item[0]))


class TallyPlotter:
    def _set_style(self) -> None:
        style = 'seaborn-v0_8-whitegrid' if 'seaborn-v0_8-whitegrid' in plt.style.available else 'ggplot'
        plt.style.use(style)

    def _reset_style(self) -> None:
        plt.style.use('default')

    def plot_tally(self, tally: Mapping[str, int], save_path: str | Path) -> bool:
        """Draw a bar chart of votes per candidate. Returns False when there is nothing to plot."""
        if not tally or sum(tally.values()) == 0:
            return False

        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        self._set_style()
        ordered = sorted_tally(tally)
        labels = [candidate for candidate, _ in ordered]
        counts = [count for _, count in ordered]

        plt.figure(figsize=(10, 6))
        bars = plt.bar(labels, counts, color='#3498db', edgecolor='#2c3e50')
        for bar, count in zip(bars, counts):
            plt.text(
                bar.get_x() + bar.get_width() / 2,
                bar.get_height(),
                str(count),
                ha='center',
                va='bottom',
                fontsize=10,
            )

        plt.xlabel('Candidate', fontsize=12)
        plt.ylabel('Votes', fontsize=12)
        plt.title('Votes per Candidate', fontsize=14, fontweight='bold')
        plt.xticks(rotation=45 if len(labels) > 6 else 0, ha='right' if len(labels) > 6 else 'center')
        plt.tight_layout()
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        plt.close()
        self._reset_style()
        return True
