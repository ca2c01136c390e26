"""일단가 CLI — 터미널에서 여행 계획 마법사 실행"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from dotenv import load_dotenv

from ildanga.application.context import make_app_context
from ildanga.application.wizard import DURATION_OPTIONS, STEP_LABELS, WizardController, WizardStep
from ildanga.config.settings import get_settings
from ildanga.domain.catalog import load_regions, random_region
from ildanga.domain.enums import ScheduleItemType, TripStyle
from ildanga.domain.exceptions import DomainError
from ildanga.domain.models import DaySchedule
from ildanga.nlg.prompt_builder import nights_and_days, short_style_label

load_dotenv()  # .env 자동 로드

_PAGE_PREVIEW = 20


class _Quit(Exception):
    pass


def _ask(prompt: str) -> str:
    try:
        answer = input(prompt).strip()
    except (EOFError, KeyboardInterrupt):
        raise _Quit() from None
    if answer.lower() in {"q", "quit", "exit"}:
        raise _Quit()
    return answer


def _parse_indices(text: str, upper: int) -> list[int]:
    """'1 3,5' → [0, 2, 4]; 범위를 벗어난 번호는 무시"""
    picked: list[int] = []
    for token in text.replace(",", " ").split():
        if token.isdigit() and 1 <= int(token) <= upper:
            picked.append(int(token) - 1)
    return picked


def format_schedule(schedule: list[DaySchedule]) -> str:
    lines: list[str] = []
    for day in schedule:
        header = f"📅 {day.day}일차" + (f" ({day.date})" if day.date else "")
        lines.append(header)
        lines.append("-" * 40)
        if not day.items:
            lines.append("  (일정 없음)")
        for item in day.items:
            icon = "🍽️" if item.type == ScheduleItemType.RESTAURANT else "📍"
            lines.append(f"  {icon} {item.name}  ({item.duration}분)")
            if item.address:
                lines.append(f"     {item.address}")
    return "\n".join(lines)


def _print_guide(wizard: WizardController) -> None:
    if wizard.error:
        print(f"\n❌ {wizard.error}")
    if wizard.guide is not None:
        print(f"\n{wizard.guide.title}")
        for step in wizard.guide.steps:
            print(f"   {step}")
        print(f"   👉 {wizard.guide.url}")


def _choose_region() -> int:
    regions = load_regions()
    print("\n🗺️  어디로 떠나볼까요?")
    for idx, region in enumerate(regions, 1):
        print(f"  {idx:>2}. {region.name} ({region.province})  {region.slogan}")
    while True:
        answer = _ask("\n번호 입력 (r = 랜덤): ")
        if answer.lower() == "r":
            region = random_region()
            print(f"🎲 {region.name} 당첨!")
            return region.id
        picked = _parse_indices(answer, len(regions))
        if picked:
            return regions[picked[0]].id


def _run_info(wizard: WizardController) -> None:
    print(f"\n{STEP_LABELS[WizardStep.INFO]}")
    for idx, (days, label) in enumerate(DURATION_OPTIONS, 1):
        print(f"  {idx}. {label}")
    while True:
        picked = _parse_indices(_ask("여행 기간: "), len(DURATION_OPTIONS))
        if not picked:
            continue
        days = DURATION_OPTIONS[picked[0]][0]
        wizard.choose_duration_option(days)
        if days == 0:
            wizard.enter_custom_days(_ask("며칠 동안 여행하나요? "))
        if wizard.duration_resolved():
            break
        print("여행 기간을 1일 이상으로 입력해주세요.")

    styles = list(TripStyle)
    print("  여행 스타일: " + "  ".join(f"{i}. {short_style_label(s)}" for i, s in enumerate(styles, 1)))
    picked = _parse_indices(_ask("스타일 (엔터 = 건너뛰기): "), len(styles))
    wizard.set_trip_style(styles[picked[0]] if picked else None)
    wizard.next()


def _run_attractions(wizard: WizardController) -> Optional[str]:
    print(f"\n{STEP_LABELS[WizardStep.ATTRACTIONS]}")
    _print_guide(wizard)
    for idx, attraction in enumerate(wizard.attractions[:_PAGE_PREVIEW], 1):
        mark = "✅" if wizard.store.has_attraction(attraction.id) else "  "
        print(f"  {mark} {idx:>2}. {attraction.title}  {attraction.addr1}")
    print(f"  선택: {len(wizard.store.selected_attractions)}곳")
    return _ask("번호 토글 / n = 다음 / b = 이전 / r = 다시 시도: ")


def _run_restaurants(wizard: WizardController) -> Optional[str]:
    print(f"\n{STEP_LABELS[WizardStep.RESTAURANTS]}")
    _print_guide(wizard)
    for idx, restaurant in enumerate(wizard.restaurants, 1):
        mark = "✅" if wizard.store.has_restaurant(restaurant.id) else "  "
        print(f"  {mark} {idx:>2}. {restaurant.place_name}  {restaurant.category_name}")
    print(f"  선택: {len(wizard.store.selected_restaurants)}곳")
    more = " / m = 더보기" if wizard.has_more_restaurants else ""
    return _ask(f"번호 토글{more} / n = 다음 / b = 이전: ")


def _run_result(wizard: WizardController) -> str:
    session = wizard.store.snapshot()
    region = session.destination
    print("\n" + "=" * 40)
    print(f"🧳 {region.name if region else ''} {nights_and_days(session.duration)}")
    print("=" * 40)
    print(format_schedule(wizard.schedule))
    return _ask("\np = AI 프롬프트 보기 / g = AI 일정 생성 / b = 이전 / new = 새 여행: ")


def _handle_selection(wizard: WizardController, answer: str) -> None:
    if wizard.step == WizardStep.ATTRACTIONS:
        pool = wizard.attractions[:_PAGE_PREVIEW]
        for idx in _parse_indices(answer, len(pool)):
            wizard.toggle_attraction(pool[idx])
    elif wizard.step == WizardStep.RESTAURANTS:
        pool = list(wizard.restaurants)
        for idx in _parse_indices(answer, len(pool)):
            wizard.toggle_restaurant(pool[idx])


def run_wizard(wizard: WizardController, region_id: int) -> None:
    wizard.open_region(region_id)
    while True:
        if wizard.step == WizardStep.INFO:
            _run_info(wizard)
            continue
        if wizard.step == WizardStep.DESTINATION:
            wizard.open_region(_choose_region())
            continue

        if wizard.step == WizardStep.ATTRACTIONS:
            answer = _run_attractions(wizard)
        elif wizard.step == WizardStep.RESTAURANTS:
            answer = _run_restaurants(wizard)
        else:
            answer = _run_result(wizard)

        command = (answer or "").lower()
        if command == "n":
            wizard.next()
        elif command == "b":
            wizard.back()
        elif command == "r":
            wizard.retry()
        elif command == "m":
            wizard.load_more_restaurants()
        elif command == "p":
            print("\n" + wizard.build_prompt())
        elif command == "g":
            print("\n⏳ AI가 일정을 만들고 있어요...")
            result = wizard.generate_plan()
            print("\n" + (result.plan if result.success and result.plan else f"❌ {result.error}"))
            _print_guide(wizard)
        elif command == "new":
            wizard.new_trip()
        else:
            _handle_selection(wizard, answer or "")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ildanga", description="일단가: 국내 여행 계획 마법사")
    parser.add_argument("--storage", help="여행 상태 JSON 파일 경로 (기본: TRIP_STORAGE_PATH)")
    parser.add_argument("--api-base-url", help="실행 중인 일단가 API 서버 주소 (기본: ILDANGA_API_BASE_URL, 없으면 로컬 키로 직접 호출)")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--region", type=int, help="여행지 id")
    group.add_argument("--random", action="store_true", help="랜덤 여행지 뽑기")
    parser.add_argument("--list-regions", action="store_true", help="여행지 목록만 출력")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.list_regions:
        for region in load_regions():
            print(f"{region.id:>3}  {region.name}  {region.province}  {region.slogan}")
        return 0

    ctx = make_app_context(
        storage_path=args.storage,
        api_base_url=args.api_base_url or get_settings().api_base_url,
    )
    wizard = ctx.make_wizard()
    print("일단가 🧳  (q 입력 시 종료)")
    print("=" * 40)

    try:
        if args.region is not None:
            region_id = args.region
        elif args.random:
            region_id = random_region().id
        elif ctx.store.destination is not None:
            region_id = ctx.store.destination.id
            print(f"이어서 계획하기: {ctx.store.destination.name}")
        else:
            region_id = _choose_region()
        run_wizard(wizard, region_id)
    except _Quit:
        print("\n다음 여행에서 만나요! 👋")
        return 0
    except DomainError as exc:
        print(f"\n❌ {exc}", file=sys.stderr)
        return 1
    finally:
        ctx.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
