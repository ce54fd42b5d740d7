import sqlite3
import sys
from pathlib import Path

from backend import DEFAULT_DB_PATH
from backend.utils import format_date, format_time


def main(db_path: Path = DEFAULT_DB_PATH):
    """Print every stored history row, including soft deleted ones."""
    conn = sqlite3.connect(str(db_path))
    cursor = conn.cursor()
    try:
        cursor.execute("""
            SELECT id, routine_name, completed_at, total_duration_ms,
                   completed_exercise_count, total_exercise_count, deleted
            FROM session_history
            ORDER BY completed_at DESC
        """)
    except sqlite3.OperationalError:
        print("No session history in", db_path)
        conn.close()
        return
    rows = cursor.fetchall()
    conn.close()

    for row in rows:
        entry_id, name, completed_at, duration_ms, done, total, deleted = row
        flag = "  [deleted]" if deleted else ""
        print(f"\n=== {name} ({entry_id}){flag} ===")
        print(f"Completed: {format_date(completed_at)}")
        print(f"Duration:  {format_time(duration_ms // 1000)}")
        print(f"Exercises: {done}/{total}")


if __name__ == "__main__":
    main(Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_DB_PATH)
