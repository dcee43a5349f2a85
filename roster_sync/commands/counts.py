from __future__ import annotations

from ..app import RosterApp
from ..services import NameCountService
from ..services.counts import PREVIEW_LIMIT


def run(app: RosterApp) -> None:
    report = NameCountService(app).run()
    if not report.directory_available:
        print("Directory unavailable; names are not compared against it.")
    for count in report.tabs:
        print(
            f"{count.tab}: rows={count.rows}, named={count.named_rows}, "
            f"unique={count.unique_names}"
        )
        if count.not_in_directory:
            print(f"    {len(count.not_in_directory)} not in Directory")
            for name in count.not_in_directory[:PREVIEW_LIMIT]:
                print(f"      - {name}")
