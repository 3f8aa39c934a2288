# Prompts and output schemas for the two AI endpoints.
# Templates use str.format placeholders; literal braces are doubled.
# Both schemas are passed to the model as forced tool inputs, so the reply
# always has the declared shape but its values still need checking.
from dataclasses import dataclass

from models import CATEGORIES, PRIORITIES, TodoAnalysis
from temporal import TemporalReferences, civil_date
from todo_stats import percent

TODO_TOOL_NAME = "create_todo"
ANALYSIS_TOOL_NAME = "analyze_todos"


@dataclass(frozen=True)
class PromptSpec:
    name: str
    instruction: str
    schema: dict


TODO_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {
            "type": "string",
            "description": "할 일의 간결한 제목 (최대 100자)",
        },
        "description": {
            "type": "string",
            "description": "할 일에 대한 추가 설명이나 메모",
        },
        "due_date": {
            "type": "string",
            "description": "마감일 (YYYY-MM-DD 형식). 날짜가 언급되지 않으면 생략",
        },
        "due_time": {
            "type": "string",
            "description": "마감 시간 (HH:mm 형식, 24시간제). 시간이 명시되지 않으면 09:00 사용",
        },
        "priority": {
            "type": "string",
            "enum": ["low", "medium", "high"],
            "description": '우선순위: high="급하게,중요한,빨리,꼭,반드시", '
                           'medium="보통,적당히,키워드없음", low="여유롭게,천천히,언젠가"',
        },
        "category": {
            "type": "array",
            "items": {"type": "string", "enum": list(CATEGORIES)},
            "description": '카테고리 배열: 업무="회의,보고서,프로젝트", 개인="쇼핑,친구,가족", '
                           '건강="운동,병원,요가", 학습="공부,책,강의". 여러 개 가능',
        },
    },
    "required": ["title", "priority", "category"],
}

ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "description": "전체 할 일에 대한 간결한 요약 (완료율, 전체 개수 등)",
        },
        "urgentTasks": {
            "type": "array",
            "items": {"type": "string"},
            "maxItems": 5,
            "description": "긴급하게 처리해야 할 작업 제목 목록 (최대 5개)",
        },
        "insights": {
            "type": "array",
            "items": {"type": "string"},
            "description": "할 일 패턴과 현황에 대한 인사이트 (구체적이고 실행 가능한 내용)",
        },
        "recommendations": {
            "type": "array",
            "items": {"type": "string"},
            "description": "생산성 향상을 위한 구체적인 추천 사항 (실행 가능한 조언)",
        },
    },
    "required": ["summary", "urgentTasks", "insights", "recommendations"],
}


TODO_PROMPT = """당신은 할 일 관리 전문 AI 어시스턴트입니다.
사용자가 자연어로 입력한 할 일을 분석하여 구조화된 데이터로 변환해주세요.

[현재 시간 정보]
- 오늘: {today} ({day_name}요일)
- 현재 시각: {current_time}
- 내일: {tomorrow}
- 모레: {day_after_tomorrow}
- 이번 주 금요일: {this_friday}
- 다음 주 월요일: {next_monday}

[사용자 입력]
"{text}"

[변환 규칙 (반드시 준수)]

1. 제목(title)
- 핵심 내용만 간결하게 추출
- 동사형 선호 (예: "회의 준비", "보고서 작성")

2. 설명(description)
- 추가 세부사항이나 메모가 있으면 포함
- 없으면 생략

3. 마감일(due_date) - YYYY-MM-DD 형식
날짜 표현 -> 실제 날짜 변환:
- "오늘" -> {today}
- "내일" -> {tomorrow}
- "모레" -> {day_after_tomorrow}
- "이번 주 금요일" -> {this_friday}
- "다음 주 월요일" -> {next_monday}
- 구체적 날짜 언급 없으면 생략

4. 마감시간(due_time) - HH:mm 형식 (24시간제)
시간 표현 -> 실제 시간 변환:
- "아침" -> 09:00
- "점심" -> 12:00
- "오후" -> 14:00
- "저녁" -> 18:00
- "밤" -> 21:00
- "오후 3시", "15시" 등 구체적 시간은 24시간제로 그대로 변환
- 시간 언급 없으면 09:00 사용

5. 우선순위(priority)
키워드 기반 판단:
- high: "급하게", "중요한", "빨리", "꼭", "반드시"
- low: "여유롭게", "천천히", "언젠가"
- medium: 위 키워드 없음 또는 "보통", "적당히"

6. 카테고리(category) - 배열 형식
키워드 기반 분류 (여러 개 가능):
- 업무: "회의", "보고서", "프로젝트", "업무", "미팅", "발표"
- 개인: "쇼핑", "친구", "가족", "개인", "약속", "생일"
- 건강: "운동", "병원", "건강", "요가", "헬스", "진료"
- 학습: "공부", "책", "강의", "학습", "수업", "시험"
- 키워드 없으면 ["개인"] 기본값

[출력 예시]

입력: "내일 오후 3시까지 중요한 팀 회의 준비하기"
출력:
{{
  "title": "팀 회의 준비",
  "due_date": "{tomorrow}",
  "due_time": "15:00",
  "priority": "high",
  "category": ["업무"]
}}

입력: "이번 주 금요일 저녁에 친구랑 저녁 약속"
출력:
{{
  "title": "친구 저녁 약속",
  "due_date": "{this_friday}",
  "due_time": "18:00",
  "priority": "medium",
  "category": ["개인"]
}}

입력: "언젠가 천천히 요가 강의 듣기"
출력:
{{
  "title": "요가 강의 수강",
  "priority": "low",
  "category": ["건강", "학습"]
}}

[주의사항]
- 결과는 반드시 {tool_name} 도구로 제출
- 모든 필드는 스키마를 정확히 준수
- 날짜/시간 형식 반드시 준수 (YYYY-MM-DD, HH:mm)
- 카테고리는 배열 형식 (["업무"] 형태)
"""


ANALYSIS_PROMPT = """당신은 세계적인 생산성 코치이자 시간 관리 전문가입니다.
사용자의 {period_text} 할 일 목록을 깊이 있게 분석하여 실행 가능한 인사이트와 개인 맞춤형 추천 사항을 제공해주세요.

[현재 시간 정보]
- 오늘: {today} ({day_name}요일)
- 현재 시각: {current_time}
- 분석 기간: {period_text}

[완료율 분석]
- 전체: {total}개 중 {completed}개 완료 ({completion_rate}%)
- 미완료: {incomplete}개 남음
- 우선순위별 완료율:
  * 높음: {high_count}개 중 {high_completed}개 완료 ({high_rate}%)
  * 보통: {medium_count}개 중 {medium_completed}개 완료 ({medium_rate}%)
  * 낮음: {low_count}개 중 {low_completed}개 완료 ({low_rate}%)

[시간 관리 분석]
- 마감일 설정: {with_due_date}개 (전체의 {with_due_date_rate}%)
- 기한 초과: {overdue}개
- 오늘 마감: {due_today}개
- 앞으로 7일 내 마감: {due_this_week}개
- 시간대별 분포: 오전 {morning}개, 오후 {afternoon}개, 저녁 {evening}개
- 요일별 생성 분포: {weekday_distribution}

[긴급 작업 후보 (미완료, 오늘까지 마감)]
{urgent_lines}

[우선순위별 미완료 작업]
{priority_preview}

[카테고리별 분석]
{category_stats}

[할 일 상세 목록]
{todo_lines}

[분석 요구사항]
{period_requirements}
[문체 가이드라인 (반드시 준수)]
- 자연스럽고 친근한 한국어 사용
- "~하세요", "~해보세요", "~할 수 있어요" 등 격려하는 표현
- 전문적이면서도 편안한 톤 유지
- 이모지는 절대 사용하지 말 것
- 구체적인 숫자와 데이터 언급으로 신뢰성 확보
- 사용자를 판단하지 않고 항상 긍정적으로 지원
- 실천 가능한 구체적 행동 제시
- "해야 한다" 대신 "~하면 좋아요", "~해보는 건 어떨까요" 사용

[핵심 원칙]
1. 항상 긍정적 피드백으로 시작하기
2. 데이터 기반의 구체적인 분석 제공
3. 실행 가능하고 현실적인 조언만 제시
4. 사용자의 노력과 성취 인정하기
5. 완벽보다는 개선과 성장 강조하기
6. 동기부여와 격려를 잊지 않기

결과는 반드시 {tool_name} 도구로 제출하세요.
"""


TODAY_REQUIREMENTS = """오늘의 요약 특화 분석:

1. summary (오늘의 진행 상황):
   - 오늘의 완료율과 진행 상황을 구체적으로
   - 현재 시각({current_time})을 고려해 오늘 남은 시간의 활용 방안 언급
   - "오늘 하루도 수고하셨어요" 등 격려 메시지 포함
   - 예: "오늘 {total}개 중 {completed}개를 완료하셨네요! 남은 시간을 활용해 나머지도 해낼 수 있어요."

2. urgentTasks (오늘 우선 처리 작업):
   - [긴급 작업 후보] 목록의 작업을 먼저 포함
   - 오늘 마감인 작업 최우선
   - 기한 초과된 작업 포함
   - 높은 우선순위 작업 선정
   - 최대 5개, 없으면 빈 배열

3. insights (오늘의 집중 인사이트 4-6개, 아래 순서대로):
   긍정적 피드백 (1-2개, 필수, 가장 먼저):
   - 잘하고 있는 부분 구체적으로 칭찬
   - 완료한 작업의 의미 강조
   당일 패턴 분석 (2-3개):
   - 시간대별 작업 분포의 균형성
   - 카테고리별 작업 분포와 업무 다양성
   - 마감일이 있는 작업 vs 없는 작업 비율
   주의 필요 사항 (0-2개, 해당할 때만):
{caution_hint}   - 긍정적 톤으로 개선 가능성 제시

4. recommendations (오늘을 위한 실행 가능한 조언 4-6개):
   우선순위 관리 (1-2개):
   - 남은 시간 동안 집중할 작업 순서 제안
   - 긴급-중요 매트릭스 기반 재배치 조언
   시간 관리 팁 (1-2개):
   - 구체적인 시간대 활용 전략
   - 집중 시간 확보와 휴식 타이밍 제안
   동기부여 및 실천 전략 (1-2개):
   - 작은 성취를 통한 동력 확보
   - 번아웃 방지와 자기 보상 제안
   업무 분산 및 균형 (0-1개, 필요할 때만):
   - 과부하된 시간대 분산
   - 카테고리 간 균형 조정
"""


WEEK_REQUIREMENTS = """이번 주 요약 특화 분석:

1. summary (이번 주 전체 평가):
   - 주간 완료율과 전반적 진행 상황
   - 이번 주의 생산성 수준 평가 (완료율 {completion_rate}%는 {rate_label} 수준)
   - 다음 주를 위한 희망적 메시지

2. urgentTasks (이번 주 내 긴급 작업):
   - [긴급 작업 후보] 목록의 작업을 먼저 포함
   - 이번 주 내 마감 작업
   - 기한 초과된 작업
   - 다음 주로 넘어가면 안 되는 중요 작업
   - 최대 5개, 없으면 빈 배열

3. insights (주간 패턴 및 생산성 인사이트 5-7개, 아래 순서대로):
   주간 성과 및 강점 (2개, 필수, 가장 먼저):
   - 이번 주에 잘한 부분 구체적으로 칭찬
   - 완료율이 높은 카테고리나 우선순위 강조
   주간 생산성 패턴 (2-3개):
   - 요일별 작업 생성 패턴
   - 주중 vs 주말 작업 분포
   - 시간대별 업무 집중도 분석
   마감일 관리 및 시간 패턴 (1-2개):
   - 마감일 준수율 평가
   - 기한 초과 작업의 공통 특징과 미루는 작업 유형
   개선 가능 영역 (1개, 반드시 격려와 함께):
   - 낮은 완료율 카테고리나 우선순위 (예: 낮은 우선순위 완료율 {low_rate}%)

4. recommendations (다음 주를 위한 전략적 조언 5-7개):
   다음 주 계획 수립 (2개):
   - 이번 주 패턴을 바탕으로 한 다음 주 전략
   - 미완료 작업 {incomplete}개의 처리 계획
   생산성 향상 전략 (2개):
   - 가장 생산적인 시간대 활용법
   - 작업 묶음 처리 (배칭) 전략
   우선순위 및 분산 전략 (1-2개):
   - 과부하된 카테고리 분산과 업무-개인 균형
   실천 가능한 습관 (1-2개):
   - 작은 습관 형성과 꾸준함 유지 전략
   동기부여 및 마인드셋 (1개):
   - 완벽주의 탈피와 성장 마인드셋 격려
"""


PRIORITY_LABELS = {"high": "높음", "medium": "보통", "low": "낮음"}

EMPTY_SUMMARIES = {
    "today": "오늘 등록된 할 일이 없습니다.",
    "week": "이번 주 등록된 할 일이 없습니다.",
}


def build_todo_prompt(text: str, refs: TemporalReferences) -> PromptSpec:
    instruction = TODO_PROMPT.format(
        today=refs.today.isoformat(),
        day_name=refs.day_name,
        current_time=refs.current_time,
        tomorrow=refs.tomorrow.isoformat(),
        day_after_tomorrow=refs.day_after_tomorrow.isoformat(),
        this_friday=refs.this_friday.isoformat(),
        next_monday=refs.next_monday.isoformat(),
        text=text,
        tool_name=TODO_TOOL_NAME,
    )
    return PromptSpec(name=TODO_TOOL_NAME, instruction=instruction, schema=TODO_SCHEMA)


def _todo_line(index: int, todo) -> str:
    status = "완료" if todo.completed else "미완료"
    priority = PRIORITY_LABELS.get(todo.priority, todo.priority)
    categories = f" [{', '.join(todo.category)}]" if todo.category else ""
    due = f"마감: {todo.due_date.isoformat()}" if todo.due_date else "마감일 없음"
    return f"{index}. {status} | {priority} | {todo.title}{categories} | {due}"


def _urgent_lines(statistics) -> str:
    if not statistics.urgent:
        return "- 없음"
    return "\n".join(
        f"- {todo.title} (마감: {civil_date(todo.due_date).isoformat()})" for todo in statistics.urgent
    )


def _priority_preview(statistics) -> str:
    lines = []
    for priority in PRIORITIES:
        shown, overflow = statistics.priority_preview(priority)
        titles = ", ".join(todo.title for todo in shown) or "없음"
        if overflow:
            titles += f" 외 {overflow}개"
        lines.append(f"- {PRIORITY_LABELS[priority]}: {titles}")
    return "\n".join(lines)


def _rate_label(rate: float) -> str:
    if rate >= 70:
        return "매우 훌륭한"
    if rate >= 50:
        return "좋은"
    return "개선 가능한"


def _caution_hint(statistics) -> str:
    lines = []
    if statistics.overdue_count:
        lines.append(f"   - 기한 초과 작업 {statistics.overdue_count}개 언급")
    high_open = len(statistics.incomplete_by_priority.get("high", []))
    if high_open:
        lines.append(f"   - 높은 우선순위인데 미완료된 작업 {high_open}개")
    if not lines:
        lines.append("   - 현재 특별히 주의할 사항이 없으면 이 항목은 생략")
    return "\n".join(lines) + "\n"


def build_analysis_prompt(statistics, todos, period: str, refs: TemporalReferences) -> PromptSpec:
    """
    Render statistics and the todo list into the analysis instruction.

    The requirement block depends on `period`: "today" asks for 4-6 insights
    and recommendations framed around the rest of the day, "week" asks for
    5-7 of each with a weekly review and next-week plan.
    """
    priority = statistics.priority_stats
    category_stats = ", ".join(
        f"{name} {stat.count}개 (완료 {stat.completed}개, {stat.rate}%)"
        for name, stat in statistics.category_stats.items()
    ) or "카테고리 미지정"
    weekday_distribution = ", ".join(
        f"{day} {count}개" for day, count in statistics.weekday_distribution.items() if count
    ) or "데이터 없음"

    if period == "today":
        requirements = TODAY_REQUIREMENTS.format(
            current_time=refs.current_time,
            total=statistics.total,
            completed=statistics.completed,
            caution_hint=_caution_hint(statistics),
        )
    else:
        requirements = WEEK_REQUIREMENTS.format(
            completion_rate=statistics.completion_rate_detail,
            rate_label=_rate_label(statistics.completion_rate_detail),
            low_rate=priority["low"].rate,
            incomplete=statistics.incomplete,
        )

    instruction = ANALYSIS_PROMPT.format(
        period_text="오늘" if period == "today" else "이번 주",
        today=refs.today.isoformat(),
        day_name=refs.day_name,
        current_time=refs.current_time,
        total=statistics.total,
        completed=statistics.completed,
        completion_rate=statistics.completion_rate_detail,
        incomplete=statistics.incomplete,
        high_count=priority["high"].count,
        high_completed=priority["high"].completed,
        high_rate=priority["high"].rate,
        medium_count=priority["medium"].count,
        medium_completed=priority["medium"].completed,
        medium_rate=priority["medium"].rate,
        low_count=priority["low"].count,
        low_completed=priority["low"].completed,
        low_rate=priority["low"].rate,
        with_due_date=statistics.with_due_date_count,
        with_due_date_rate=percent(statistics.with_due_date_count, statistics.total, ".1"),
        overdue=statistics.overdue_count,
        due_today=statistics.due_today_count,
        due_this_week=statistics.due_this_week_count,
        morning=statistics.due_hour_buckets["morning"],
        afternoon=statistics.due_hour_buckets["afternoon"],
        evening=statistics.due_hour_buckets["evening"],
        weekday_distribution=weekday_distribution,
        urgent_lines=_urgent_lines(statistics),
        priority_preview=_priority_preview(statistics),
        category_stats=category_stats,
        todo_lines="\n".join(_todo_line(i, todo) for i, todo in enumerate(todos, start=1)),
        period_requirements=requirements,
        tool_name=ANALYSIS_TOOL_NAME,
    )
    return PromptSpec(name=ANALYSIS_TOOL_NAME, instruction=instruction, schema=ANALYSIS_SCHEMA)


def empty_analysis(period: str) -> TodoAnalysis:
    """Fixed result for a period with no todos; no model call is made for it."""
    return TodoAnalysis(
        summary=EMPTY_SUMMARIES.get(period, EMPTY_SUMMARIES["today"]),
        urgentTasks=[],
        insights=[
            "아직 할 일을 추가하지 않으셨네요.",
            "새로운 할 일을 추가해보세요!",
        ],
        recommendations=[
            "할 일을 추가하여 체계적으로 관리해보세요.",
            "AI 생성 기능을 활용하면 더 쉽게 할 일을 만들 수 있습니다.",
        ],
    )
