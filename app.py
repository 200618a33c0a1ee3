import streamlit as st
from utils.config import load_config
from utils.formatting import set_locale, fmt_km, fmt_speed_kmh
from utils.styling import apply_theme
from streamlit.logger import get_logger

logger = get_logger(__name__)


def main():
    st.set_page_config(page_title="Trail Pacer", layout="wide")
    cfg = load_config()
    set_locale(cfg.locale)
    apply_theme()
    st.session_state.setdefault("app_config", cfg)
    logger.debug("DATA_DIR: %s", cfg.data_dir)
    st.title("Trail Pacer")
    st.caption("Plan d'allure selon le relief : ouvrez la page « RacePacing » dans la barre latérale.")

    with st.expander("Configuration", expanded=False):
        st.write(
            {
                "DATA_DIR": str(cfg.data_dir),
                "PACING_LOCALE": cfg.locale,
                "PACING_RESAMPLE_STEP_M": cfg.resample_step_m,
                "PACING_SMOOTHING_WINDOW": cfg.smoothing_window,
            }
        )
    st.write("Exemple d'affichage :", fmt_km(42.2), "|", fmt_speed_kmh(9.4))


if __name__ == "__main__":
    main()
