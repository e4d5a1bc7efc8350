from __future__ import annotations

ESC = '\x1b'

# Сколько ждать продолжения после одиночного ESC, прежде чем считать его клавишей
ESC_TIMEOUT_S = 0.05

# CSI и SS3 варианты стрелок
ARROW_SEQUENCES: dict[str, str] = {
    '\x1b[A': 'up',
    '\x1b[B': 'down',
    '\x1b[C': 'right',
    '\x1b[D': 'left',
    '\x1bOA': 'up',
    '\x1bOB': 'down',
    '\x1bOC': 'right',
    '\x1bOD': 'left',
}


def _is_final_byte(ch: str) -> bool:
    return '\x40' <= ch <= '\x7e'


class KeyDecoder:
    """Разбирает поток ввода терминала в имена клавиш.

    Escape-последовательность может прийти по частям в разных чтениях,
    поэтому незавершённый хвост (в том числе одиночный ESC) откладывается
    до следующего feed() или до flush().
    """

    def __init__(self) -> None:
        self._pending = ''

    @property
    def pending(self) -> bool:
        return bool(self._pending)

    def feed(self, data: str) -> list[str]:
        data = self._pending + data
        self._pending = ''
        keys: list[str] = []
        i = 0
        while i < len(data):
            ch = data[i]
            if ch != ESC:
                keys.append(ch)
                i += 1
                continue
            if i + 1 == len(data):
                self._pending = data[i:]
                break
            seq = data[i:i + 3]
            if seq in ARROW_SEQUENCES:
                keys.append(ARROW_SEQUENCES[seq])
                i += 3
                continue
            if data[i + 1] in '[O':
                # Неизвестная последовательность: до конечного байта 0x40-0x7E
                j = i + 2
                while j < len(data) and not _is_final_byte(data[j]):
                    j += 1
                if j == len(data):
                    self._pending = data[i:]
                    break
                i = j + 1
                continue
            keys.append('esc')
            i += 1
        return keys

    def flush(self) -> list[str]:
        """Отложенный одиночный ESC становится клавишей, обрывки отбрасываются."""
        pending, self._pending = self._pending, ''
        return ['esc'] if pending == ESC else []


def decode_keys(data: str) -> list[str]:
    """Разбирает законченную порцию ввода в имена клавиш.

    Стрелки -> 'up'/'down'/'left'/'right', одиночный ESC -> 'esc',
    прочие escape-последовательности пропускаются, остальные символы
    возвращаются как есть.
    """
    decoder = KeyDecoder()
    return decoder.feed(data) + decoder.flush()
