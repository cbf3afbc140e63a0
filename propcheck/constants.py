"""
Constants and lookup tables for propcheck.

Provides sport-level baselines, stadium geometry used by the weather
signal, rivalry pairs, milestone marks and stat key normalization.
"""

from typing import Dict, FrozenSet, List, Tuple


# =============================================================================
# SIGNALS
# =============================================================================

OVER = "over"
UNDER = "under"
NEUTRAL = "neutral"
TOSS_UP = "toss-up"

SIGNALS: Tuple[str, str, str] = (OVER, UNDER, NEUTRAL)


# =============================================================================
# STAT KEYS
# =============================================================================

STAT_ALIASES: Dict[str, str] = {
    'pts': 'points',
    'point': 'points',
    'reb': 'rebounds',
    'rebs': 'rebounds',
    'ast': 'assists',
    'asts': 'assists',
    'stl': 'steals',
    'blk': 'blocks',
    'tov': 'turnovers',
    'min': 'minutes',
    'mins': 'minutes',
    '3pm': 'threes',
    'fg3m': 'threes',
    'three_pointers': 'threes',
    'pra': 'points_rebounds_assists',
    'k': 'strikeouts',
    'so': 'strikeouts',
    'tb': 'total_bases',
    'pass_yds': 'passing_yards',
    'rush_yds': 'rushing_yards',
    'rec_yds': 'receiving_yards',
    'rec': 'receptions',
}

NFL_PASSING_STATS: FrozenSet[str] = frozenset({
    'passing_yards', 'passing_tds', 'completions',
    'receiving_yards', 'receptions', 'receiving_tds',
})
NFL_RUSHING_STATS: FrozenSet[str] = frozenset({'rushing_yards', 'rushing_tds'})

# Stats where a missing high-usage teammate tends to push volume up
USAGE_STATS: FrozenSet[str] = frozenset({'points', 'assists'})


# =============================================================================
# GAME ENVIRONMENT
# =============================================================================

# Median combined score per sport, used as the neutral game total
SPORT_MEDIAN_TOTALS: Dict[str, float] = {
    'nba': 224.0,
    'mlb': 8.5,
    'nfl': 44.0,
}


# =============================================================================
# PITCHING (MLB)
# =============================================================================

LEAGUE_AVG_ERA = 4.20
LEAGUE_AVG_K_PER_9 = 8.9
LEAGUE_AVG_WHIP = 1.30
LEAGUE_AVG_WRC_PLUS = 100.0


# =============================================================================
# WEATHER
# =============================================================================

DIRECTION_DEGREES: Dict[str, float] = {
    'N': 0.0, 'NNE': 22.5, 'NE': 45.0, 'ENE': 67.5,
    'E': 90.0, 'ESE': 112.5, 'SE': 135.0, 'SSE': 157.5,
    'S': 180.0, 'SSW': 202.5, 'SW': 225.0, 'WSW': 247.5,
    'W': 270.0, 'WNW': 292.5, 'NW': 315.0, 'NNW': 337.5,
}

# Bearing from home plate to center field, per home team
MLB_OUTFIELD_ORIENTATION: Dict[str, float] = {
    'ARI': 0, 'ATL': 225, 'BAL': 225, 'BOS': 200, 'CHC': 220,
    'CWS': 210, 'CIN': 225, 'CLE': 175, 'COL': 230, 'DET': 195,
    'HOU': 0, 'KC': 180, 'LAA': 200, 'LAD': 225, 'MIA': 0,
    'MIL': 0, 'MIN': 205, 'NYM': 225, 'NYY': 195, 'OAK': 195,
    'PHI': 210, 'PIT': 180, 'SD': 195, 'SF': 210, 'SEA': 0,
    'STL': 200, 'TB': 0, 'TEX': 0, 'TOR': 0, 'WSH': 215,
}
DEFAULT_OUTFIELD_ORIENTATION = 200.0

# Domes and covered stadiums
NFL_INDOOR_STADIUMS: FrozenSet[str] = frozenset({
    'ARI', 'ATL', 'DAL', 'DET', 'HOU', 'IND', 'LV', 'LAC', 'LAR', 'MIN', 'NO',
})

PRECIPITATION_CONDITIONS: Tuple[str, ...] = ('rain', 'drizzle', 'thunderstorm', 'snow')

# (threshold mph, signal, label) checked in order, first match wins
MLB_WIND_OUT_STEPS: List[Tuple[float, float, str]] = [
    (15.0, 0.7, 'Strong wind blowing out'),
    (10.0, 0.4, 'Wind blowing out'),
    (5.0, 0.2, 'Mild wind out'),
]
MLB_WIND_IN_STEPS: List[Tuple[float, float, str]] = [
    (15.0, -0.8, 'Strong wind blowing in'),
    (10.0, -0.5, 'Wind blowing in'),
    (5.0, -0.2, 'Mild wind in'),
]
NFL_PASSING_WIND_STEPS: List[Tuple[float, float, str]] = [
    (30.0, -0.8, 'Extreme wind, major passing impact'),
    (20.0, -0.5, 'High wind, passing suppressed'),
    (15.0, -0.25, 'Notable wind for passing'),
]

WEATHER_FIRE_THRESHOLD: Dict[str, float] = {
    'mlb': 0.2,
    'nfl': 0.15,
}
DEFAULT_WEATHER_FIRE_THRESHOLD = 0.2


# =============================================================================
# NARRATIVES
# =============================================================================

MILESTONES: List[int] = [1000, 2000, 5000, 10000, 15000, 20000, 25000, 30000]

RIVALRIES: Dict[str, Dict[str, List[str]]] = {
    'nba': {
        'LAL': ['BOS', 'LAC'], 'BOS': ['LAL', 'NYK', 'PHI'],
        'NYK': ['BKN', 'BOS'], 'BKN': ['NYK'],
        'LAC': ['LAL'], 'GSW': ['LAL', 'CLE'],
        'MIA': ['BOS'], 'PHI': ['BOS', 'NYK'],
        'CHI': ['DET', 'CLE'], 'DAL': ['SAS', 'HOU'],
    },
    'mlb': {
        'NYY': ['BOS', 'NYM'], 'BOS': ['NYY'],
        'NYM': ['NYY', 'PHI'], 'PHI': ['NYM'],
        'LAD': ['SFG', 'SDP'], 'SFG': ['LAD'],
        'CHC': ['STL'], 'STL': ['CHC'],
    },
    'nfl': {
        'DAL': ['PHI', 'WSH', 'NYG'], 'PHI': ['DAL', 'NYG', 'WSH'],
        'NYG': ['DAL', 'PHI'], 'WSH': ['DAL'],
        'GB': ['CHI', 'MIN'], 'CHI': ['GB'],
        'NE': ['NYJ', 'MIA'], 'PIT': ['BAL', 'CLE'],
        'BAL': ['PIT'], 'SF': ['SEA', 'LAR'],
    },
}


def is_rivalry(sport: str, team: str, opponent: str) -> bool:
    """Check the per-sport rivalry table in both directions."""
    table = RIVALRIES.get((sport or '').lower(), {})
    return opponent in table.get(team, []) or team in table.get(opponent, [])
