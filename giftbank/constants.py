"""
Constantes da aplicação.
"""

# Versão da aplicação
APP_VERSION = "1.0.0"
APP_NAME = "GiftBank"

# Limites de tamanho de janela (percentagem)
MIN_WINDOW_PERCENT = 30
MAX_WINDOW_PERCENT = 100
DEFAULT_WINDOW_PERCENT = 66

# Composição de exames
MIN_EXAM_QUESTIONS = 15
MAX_EXAM_QUESTIONS = 20
DEFAULT_EXAM_TITLE = "New exam"

# Parser
MIN_QUESTION_CONTENT_LENGTH = 5
QUESTION_TEXT_PLACEHOLDER = "[...]"
GIFT_FILE_EXTENSION = ".gift"

# Validação de sintaxe
BRACE_TOLERANCE = 2

# Perfis
MIN_BANK_QUESTIONS = 10
HISTOGRAM_BAR_LENGTH = 50
SIGNIFICANT_DIFFERENCE = 10.0
STRONG_DIFFERENCE = 15.0
REPORT_WIDTH = 70

# Simulação
NOTE_SCALE = 20

# Pastas por omissão
DEFAULT_DATA_DIR = "./data"
DEFAULT_OUTPUT_DIR = "./output"
