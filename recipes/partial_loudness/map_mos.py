"""Map perceptual distances to mean opinion scores."""
import logging
from pathlib import Path

import hydra
from omegaconf import DictConfig

from zimt.mos import MOSMapper
from zimt.utils.file_io import read_jsonl, write_jsonl

log = logging.getLogger(__name__)


# pylint: disable = no-value-for-parameter
@hydra.main(config_path=".", config_name="config")
def map_mos(cfg: DictConfig) -> None:
    """Map the distances in the distances file to MOS."""
    records = read_jsonl(cfg.mos.distances_file)

    # The default parameters are already fitted to the calibration points,
    # refitting is only needed after the calibration changes.
    mapper = MOSMapper.from_calibration() if cfg.mos.fit_calibration else MOSMapper()

    results = [
        {
            "signal": record["signal"],
            "distance": record["distance"],
            "mos": float(mapper.map(record["distance"])),
        }
        for record in records
    ]
    Path(cfg.mos.results_file).parent.mkdir(parents=True, exist_ok=True)
    write_jsonl(cfg.mos.results_file, results)
    log.info(f"Mapped {len(results)} distances to {cfg.mos.results_file}")


if __name__ == "__main__":
    map_mos()
