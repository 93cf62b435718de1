from pathlib import Path


paradesk_base_path = Path(__file__).parent
