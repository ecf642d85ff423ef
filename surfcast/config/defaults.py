"""Default beach set used for regional summaries."""

from surfcast.config.schema import BeachConfig

DEFAULT_BEACHES: list[BeachConfig] = [
    BeachConfig(beach_id="1001", region="gangreung", name="Jukdo"),
    BeachConfig(beach_id="1002", region="gangreung"),
    BeachConfig(beach_id="1003", region="gangreung"),
    BeachConfig(beach_id="1004", region="gangreung"),
    BeachConfig(beach_id="2001", region="pohang", name="Wolpo"),
    BeachConfig(beach_id="2002", region="pohang"),
    BeachConfig(beach_id="3001", region="jeju", name="Jungmun"),
    BeachConfig(beach_id="3002", region="jeju"),
    BeachConfig(beach_id="3003", region="jeju"),
    BeachConfig(beach_id="4001", region="busan"),
]

DEFAULT_REGIONS: list[str] = ["gangreung", "pohang", "jeju", "busan"]
