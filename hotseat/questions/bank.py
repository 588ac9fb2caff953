"""
Question Bank - Static question templates.

Placeholders:
    {hot_seat}              The hot seat player's name
    {hot_seat_possessive}   "Ann's" / "James'"
    {other_player}          A random connected player other than the hot seat
"""

QUESTION_BANK: tuple[str, ...] = (
    "What is a surprising fact about {hot_seat} that most people don't know?",
    "If {hot_seat} had to eat one meal for the rest of their life, what would it be?",
    "What is {hot_seat_possessive} most irrational fear?",
    "If {hot_seat} could instantly learn any skill, what would it be?",
    "What was {hot_seat_possessive} most embarrassing moment in school?",
    "Which fictional character does {hot_seat} relate to the most?",
    "What guilty pleasure song does {hot_seat} know by heart?",
    "Where would {hot_seat} travel if money and time were no issue?",
    "What is the best prank {hot_seat} has ever pulled off?",
    "If {hot_seat} could swap lives with someone for a day, who would it be?",
    "What would {hot_seat} bring to a desert island that {other_player} would never think of?",
    "What is {hot_seat_possessive} go-to karaoke song?",
    "What did {hot_seat} want to be when they grew up?",
    "What is the worst haircut {hot_seat} has ever had?",
    "What would {hot_seat} name a pet goldfish?",
    "What food does {hot_seat} secretly hate?",
    "What is {hot_seat_possessive} most useless talent?",
    "If {hot_seat} and {other_player} started a band, what would it be called?",
    "What is the strangest thing {hot_seat} has ever eaten?",
    "What is {hot_seat_possessive} favorite way to waste an afternoon?",
    "Which celebrity would {hot_seat} most like to have dinner with?",
    "What is the first thing {hot_seat} would buy after winning the lottery?",
    "What is {hot_seat_possessive} least favorite chore?",
    "What would {hot_seat} do with a free day and no phone?",
    "What is the most trouble {hot_seat} has ever gotten into?",
)
