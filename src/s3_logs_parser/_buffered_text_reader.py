import math
import pathlib


class BufferedTextReader:
    def __init__(self, *, file_path: str | pathlib.Path, maximum_buffer_size_in_bytes: int = 10**9):
        """
        Lazily read a text file into RAM using buffers of a specified size.

        Each buffer is a list of complete lines; a line is never split across two buffers.

        Parameters
        ----------
        file_path : string or pathlib.Path
            The path to the text file to be read.
        maximum_buffer_size_in_bytes : int, default: 1 GB
            The theoretical maximum amount of RAM (in bytes) to be used by the BufferedTextReader object.
        """
        self.file_path = pathlib.Path(file_path)
        self.maximum_buffer_size_in_bytes = maximum_buffer_size_in_bytes

        # The actual amount of bytes to read per iteration is 3x less than theoretical maximum usage
        # due to decoding and handling
        self.buffer_size_in_bytes = int(maximum_buffer_size_in_bytes / 3)

        self.total_file_size = self.file_path.stat().st_size
        self.offset = 0

    def __iter__(self):
        return self

    def __len__(self) -> int:
        """An estimate of the number of buffers, for reporting progress."""
        return max(1, math.ceil(self.total_file_size / self.buffer_size_in_bytes))

    def __next__(self) -> list[str]:
        """Retrieve the next buffer from the file, or raise StopIteration if the file is exhausted."""
        if self.offset >= self.total_file_size:
            raise StopIteration

        with open(file=self.file_path, mode="rb", buffering=0) as io:
            io.seek(self.offset)
            intermediate_bytes = io.read(self.buffer_size_in_bytes)

        # At the end of the file; everything remaining is complete, even without a trailing line break
        if self.offset + len(intermediate_bytes) >= self.total_file_size:
            self.offset = self.total_file_size
            return _split_text_into_lines(text=intermediate_bytes.decode("utf-8", errors="replace"))

        # Only decode up to the last line break so that multi-byte characters and lines are never cut
        last_line_break_index = intermediate_bytes.rfind(b"\n")
        if last_line_break_index == -1:
            raise ValueError(
                f"BufferedTextReader encountered a line at offset {self.offset} that exceeds the buffer size! "
                "Try increasing the `maximum_buffer_size_in_bytes` to account for this line."
            )

        complete_bytes = intermediate_bytes[: last_line_break_index + 1]
        self.offset += len(complete_bytes)

        return _split_text_into_lines(text=complete_bytes.decode("utf-8", errors="replace"))


def _split_text_into_lines(*, text: str) -> list[str]:
    """
    Split text on line feeds only, dropping the carriage return of Windows line endings.

    Other characters treated as boundaries by `str.splitlines` (form feeds, vertical tabs, ...) can legitimately
    occur inside quoted fields of a log line. A trailing line break does not produce an empty final line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()

    return [line.removesuffix("\r") for line in lines]
