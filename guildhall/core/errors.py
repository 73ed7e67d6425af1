"""길드 도메인 예외

상태 전이 실패는 예외 대신 TransitionResult로 반환된다.
아래 예외는 생성자 검증, 레지스트리 중복, 명시적 raise_if_failed() 호출에서만 발생한다.
"""


class GuildError(Exception):
    """길드 도메인 예외 기반 클래스"""


class InvalidArgumentError(GuildError, ValueError):
    """필수 식별자 누락 등 잘못된 입력 (생성 시점에 즉시 실패)"""


class InvalidStateError(GuildError, RuntimeError):
    """허용되지 않은 상태 전이, 배치 불가 모험가 배정"""


class AlreadyExistsError(GuildError, KeyError):
    """레지스트리에 동일 ID가 이미 존재"""

    def __str__(self) -> str:
        # KeyError는 메시지를 repr로 감싸므로 원문 그대로 표시
        return str(self.args[0]) if self.args else ""


class NotFoundError(GuildError, KeyError):
    """조회 대상 ID 없음"""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
