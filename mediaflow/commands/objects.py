"""Cloud storage object references shared between commands."""

from dataclasses import dataclass

from mediaflow.lib.cor import ContextKey

GCS_SCHEME = "gs://"


@dataclass(frozen=True)
class GCSObject:
    """A reference to an object in a Cloud Storage bucket."""

    bucket: str
    name: str

    @property
    def uri(self) -> str:
        return f"{GCS_SCHEME}{self.bucket}/{self.name}"

    @classmethod
    def from_uri(cls, uri: str) -> "GCSObject":
        """Parse a `gs://bucket/name` URI.

        Raises:
            ValueError: If the URI has no `gs://` scheme, bucket or object name.
        """
        if not uri.startswith(GCS_SCHEME):
            raise ValueError(f"Not a Cloud Storage URI: {uri}")
        bucket, _, name = uri[len(GCS_SCHEME) :].partition("/")
        if not bucket or not name:
            raise ValueError(f"Cloud Storage URI must include bucket and object name: {uri}")
        return cls(bucket=bucket, name=name)

    def __str__(self) -> str:
        return self.uri


GCS_OBJECT = ContextKey("__GCS_OBJECT__", GCSObject)
"""The storage object that triggered the pipeline run."""


def replace_suffix(name: str, suffix: str, new_suffix: str) -> str:
    """Strip `suffix` from `name` (when present) and append `new_suffix`."""
    return name.removesuffix(suffix) + new_suffix
