#!/usr/bin/env python3
"""
Squad Log Tools - Game Tracker

Folds a Squad dedicated server log into a persistent record of games and
players, then reports lifetime kill, death, revive and class statistics.
The state file is read at start and written back after the log is processed,
so each run extends the results of the previous ones.
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

import openpyxl
import pandas as pd
from tqdm import tqdm

from squad_log_tools.base import SquadTool, JSONTool
from squad_log_tools.log.lifetime import (
    LifetimeRecord, build_lifetime_stats, lifetime_dataframe, lifetime_report, LIFETIME_COLUMNS
)
from squad_log_tools.log.models import GameState
from squad_log_tools.log.parser import fold_lines
from squad_log_tools.log.state_file import initial_state, state_from_dict, state_to_dict

logger = logging.getLogger(__name__)


class GameTracker(JSONTool):
    """
    Tracks Squad games and player statistics across log files.

    This class loads the saved state, folds a log file into it, reports the
    lifetime statistics and saves the state again.
    """

    REPORT_BASE_NAME = "squad_lifetime_stats"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the GameTracker with configuration.

        Args:
            config: Configuration dictionary from Config class
        """
        super().__init__(config)

        self.show_progress = bool(self.get_config('tracker.show_progress', True))
        self.strict = bool(self.get_config('tracker.strict', True))
        self.csv_report = bool(self.get_config('report.csv', False))
        self.excel_report = bool(self.get_config('report.excel', False))

    def load_state(self, statefile: str) -> GameState:
        """
        Load the saved state, or start fresh if there is none.

        Args:
            statefile: Path to the JSON state file

        Returns:
            The saved state, or the initial state if the file is missing or unreadable.

        Raises:
            StateFileError: If the file is valid JSON but not a state document.
        """
        try:
            data = self.read_json(statefile)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read state file {statefile} ({e}); starting from scratch")
            return initial_state()

        state = state_from_dict(data)
        logger.info(
            f"Loaded state with {len(state.games)} games, last processed line at {state.last_timestamp}"
        )
        return state

    def read_log(self, logfile: str) -> List[str]:
        """
        Read the log file into lines.

        Raises:
            OSError: If the log file cannot be read.
        """
        contents = self.read_text(logfile)
        return contents.split("\n")

    def process_log(self, lines: List[str], state: GameState) -> GameState:
        """
        Fold log lines into the state, with a progress bar.

        Args:
            lines: Log lines in file order
            state: State to extend

        Returns:
            The new state.
        """
        total = sum(len(line.encode('utf-8')) for line in lines)
        with tqdm(total=total, unit='B', unit_scale=True, disable=not self.show_progress,
                  file=sys.stderr) as progress:
            state = fold_lines(lines, state, strict=self.strict, progress=progress.update)

        logger.info(f"Processed {len(lines)} lines; {len(state.games)} games recorded")
        return state

    def print_results(self, lifetime: Dict[str, LifetimeRecord]) -> int:
        """
        Log the players ranked by lifetime kills.

        Returns:
            Total number of kills
        """
        df = lifetime_dataframe(lifetime)
        if df.empty:
            logger.info("No players recorded.")
            return 0

        logger.info("Lifetime stats per player (ranked by kills):")
        logger.info("=" * 50)
        for rank, row in enumerate(df.itertuples(index=False), start=1):
            logger.info(
                f"{rank:3d}. {row.player}: {row.kills} kills, {row.deaths} deaths, "
                f"{row.revives} revives (Classes: {row.classes_played})"
            )
        logger.info("=" * 50)

        grand_total = int(df["kills"].sum())
        logger.info(f"Grand Total (GT) of kills: {grand_total}")
        return grand_total

    def save_to_csv(self, lifetime: Dict[str, LifetimeRecord]) -> str:
        """Save the ranked lifetime table to a timestamped CSV file."""
        output_file = self.generate_timestamped_filename(self.REPORT_BASE_NAME, "csv")
        df = lifetime_dataframe(lifetime)
        return self.write_csv(df.to_dict('records'), output_file, headers=LIFETIME_COLUMNS)

    def save_to_excel(self, lifetime: Dict[str, LifetimeRecord]) -> str:
        """Save the ranked lifetime table to a timestamped Excel workbook."""
        output_file = self.generate_timestamped_filename(self.REPORT_BASE_NAME, "xlsx")
        excel_path = self.output_path(output_file)
        df = lifetime_dataframe(lifetime)

        os.makedirs(os.path.dirname(excel_path), exist_ok=True)

        with pd.ExcelWriter(excel_path, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Lifetime')
            worksheet = writer.sheets['Lifetime']
            for idx, column in enumerate(df.columns, 1):
                letter = openpyxl.utils.get_column_letter(idx)
                width = max([len(column)] + [len(str(value)) for value in df[column]])
                worksheet.column_dimensions[letter].width = width + 2

        logger.info(f"Lifetime stats saved to: {excel_path}")
        return excel_path

    def report(self, state: GameState, lifetime: Dict[str, LifetimeRecord]) -> Dict[str, Any]:
        """Build the document printed to standard output."""
        return {
            "lifetime_stats": lifetime_report(lifetime),
            "state": state_to_dict(state),
        }

    def save_state(self, state: GameState, statefile: str) -> str:
        return self.write_json(state_to_dict(state), statefile)

    def run(self, statefile: str, logfile: str) -> Dict[str, Any]:
        """
        Run the game tracker.

        Args:
            statefile: JSON state file to resume from and write back to
            logfile: Squad server log to process

        Returns:
            Dictionary with run results
        """
        logger.info(f"Starting game tracker on {logfile}")

        state = self.load_state(statefile)
        lines = self.read_log(logfile)
        state = self.process_log(lines, state)

        lifetime = build_lifetime_stats(state)
        kill_count = self.print_results(lifetime)
        print(json.dumps(self.report(state, lifetime), ensure_ascii=False))

        output_files = []
        if self.csv_report:
            output_files.append(self.save_to_csv(lifetime))
        if self.excel_report:
            output_files.append(self.save_to_excel(lifetime))

        self.save_state(state, statefile)

        return {
            "success": True,
            "game_count": len(state.games),
            "player_count": len(lifetime),
            "kill_count": kill_count,
            "output_files": output_files,
        }


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the game tracker command line tool.
    """
    parser = argparse.ArgumentParser(
        description="Fold a Squad server log into a saved game history and report lifetime stats.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s state.json SquadGame.log

Configuration:
    - tracker.show_progress: Show a progress bar while processing
    - tracker.strict: Abort on lines referencing unknown players (default true)
    - report.csv / report.excel: Also write the lifetime table to general.output_path
        """
    )
    SquadTool.add_standard_arguments(parser)
    args = parser.parse_args(argv)

    try:
        config = GameTracker.load_config()
        tracker = GameTracker(config)
        result = tracker.run(args.statefile, args.logfile)
        logger.debug(f"Game tracker completed: {result}")
        return 0 if result["success"] else 1

    except Exception as e:
        logger.error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
