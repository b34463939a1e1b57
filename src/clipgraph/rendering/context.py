"""Per-compile accumulation state."""

from clipgraph.models.command import InputBinding
from clipgraph.models.transitions import TransitionPoint


class CompileContext:
    """Collects inputs, pad labels and graph nodes for a single compile.

    A new context is created for every compile and dropped afterwards, so
    nothing accumulates across compositions or calls.
    """

    def __init__(self, width: int, height: int, frame_rate: float, duration: float):
        self.width = width
        self.height = height
        self.frame_rate = frame_rate
        self.duration = duration
        self.inputs: list[InputBinding] = []
        self.layer_inputs: dict[int, int] = {}
        self.video_nodes: list[str] = []
        self.audio_nodes: list[str] = []
        self.transitions: list[TransitionPoint] = []
        self._input_keys: dict[tuple[str, tuple[str, ...]], int] = {}
        self._counters: dict[str, int] = {}

    def bind_input(self, layer_index: int, source: str, options: list[str]) -> int:
        """Return the input index for (source, options), assigning one on first use."""
        key = (source, tuple(options))
        if key not in self._input_keys:
            index = len(self.inputs)
            self._input_keys[key] = index
            self.inputs.append(InputBinding(index=index, source=source, options=options))
        self.layer_inputs[layer_index] = self._input_keys[key]
        return self._input_keys[key]

    def label(self, prefix: str) -> str:
        """Next unique pad label with the given prefix: v0, v1, ..."""
        n = self._counters.get(prefix, 0)
        self._counters[prefix] = n + 1
        return f"{prefix}{n}"

    @property
    def filter_complex(self) -> str:
        return ";".join(self.video_nodes + self.audio_nodes)

    def input_args(self) -> list[str]:
        args: list[str] = []
        for binding in self.inputs:
            args.extend(binding.to_args())
        return args
