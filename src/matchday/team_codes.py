from __future__ import annotations

from typing import Dict, Iterable, Optional

NHL_LEAGUE_ID = "4380"
EPL_LEAGUE_ID = "4328"
NBA_LEAGUE_ID = "4387"
NFL_LEAGUE_ID = "4391"
MLB_LEAGUE_ID = "4424"


def _build_code_map(entries: Dict[str, Iterable[str]]) -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    for canonical, codes in entries.items():
        canonical_clean = canonical.strip()
        for code in codes:
            code_clean = code.strip().upper()
            if code_clean:
                mapping.setdefault(code_clean, canonical_clean)
    return mapping


_NHL_TEAM_CODES: Dict[str, Iterable[str]] = {
    "Anaheim Ducks": ["ANA"],
    "Boston Bruins": ["BOS"],
    "Buffalo Sabres": ["BUF"],
    "Calgary Flames": ["CGY", "CAL"],
    "Carolina Hurricanes": ["CAR"],
    "Chicago Blackhawks": ["CHI"],
    "Colorado Avalanche": ["COL"],
    "Columbus Blue Jackets": ["CBJ", "CLB"],
    "Dallas Stars": ["DAL"],
    "Detroit Red Wings": ["DET"],
    "Edmonton Oilers": ["EDM"],
    "Florida Panthers": ["FLA"],
    "Los Angeles Kings": ["LAK", "LA"],
    "Minnesota Wild": ["MIN"],
    "Montreal Canadiens": ["MTL", "MON"],
    "Nashville Predators": ["NSH", "NAS"],
    "New Jersey Devils": ["NJD", "NJ"],
    "New York Islanders": ["NYI"],
    "New York Rangers": ["NYR"],
    "Ottawa Senators": ["OTT"],
    "Philadelphia Flyers": ["PHI"],
    "Pittsburgh Penguins": ["PIT"],
    "San Jose Sharks": ["SJS", "SJ"],
    "Seattle Kraken": ["SEA"],
    "St. Louis Blues": ["STL"],
    "Tampa Bay Lightning": ["TBL", "TB"],
    "Toronto Maple Leafs": ["TOR"],
    "Utah Mammoth": ["UTA"],
    "Vancouver Canucks": ["VAN"],
    "Vegas Golden Knights": ["VGK", "VEG"],
    "Washington Capitals": ["WSH", "WAS"],
    "Winnipeg Jets": ["WPG", "WIN"],
}

_EPL_TEAM_CODES: Dict[str, Iterable[str]] = {
    "Arsenal": ["ARS"],
    "Aston Villa": ["AVL"],
    "Bournemouth": ["BOU"],
    "Brentford": ["BRE"],
    "Brighton and Hove Albion": ["BHA", "BRI"],
    "Burnley": ["BUR"],
    "Chelsea": ["CHE"],
    "Crystal Palace": ["CRY"],
    "Everton": ["EVE"],
    "Fulham": ["FUL"],
    "Ipswich Town": ["IPS"],
    "Leeds United": ["LEE", "LEED"],
    "Leicester City": ["LEI"],
    "Liverpool": ["LIV"],
    "Manchester City": ["MCI", "MCFC"],
    "Manchester United": ["MUN", "MUFC"],
    "Newcastle United": ["NEW", "NUFC"],
    "Nottingham Forest": ["NFO", "NOT"],
    "Southampton": ["SOU"],
    "Sunderland": ["SUN"],
    "Tottenham Hotspur": ["TOT", "THFC"],
    "West Ham United": ["WHU"],
    "Wolverhampton Wanderers": ["WOL"],
}

_NBA_TEAM_CODES: Dict[str, Iterable[str]] = {
    "Atlanta Hawks": ["ATL"],
    "Boston Celtics": ["BOS"],
    "Brooklyn Nets": ["BKN", "BRK"],
    "Charlotte Hornets": ["CHA", "CHO"],
    "Chicago Bulls": ["CHI"],
    "Cleveland Cavaliers": ["CLE"],
    "Dallas Mavericks": ["DAL"],
    "Denver Nuggets": ["DEN"],
    "Detroit Pistons": ["DET"],
    "Golden State Warriors": ["GSW", "GS"],
    "Houston Rockets": ["HOU"],
    "Indiana Pacers": ["IND"],
    "Los Angeles Clippers": ["LAC"],
    "Los Angeles Lakers": ["LAL"],
    "Memphis Grizzlies": ["MEM"],
    "Miami Heat": ["MIA"],
    "Milwaukee Bucks": ["MIL"],
    "Minnesota Timberwolves": ["MIN"],
    "New Orleans Pelicans": ["NOP", "NO"],
    "New York Knicks": ["NYK", "NY"],
    "Oklahoma City Thunder": ["OKC"],
    "Orlando Magic": ["ORL"],
    "Philadelphia 76ers": ["PHI"],
    "Phoenix Suns": ["PHX", "PHO"],
    "Portland Trail Blazers": ["POR"],
    "Sacramento Kings": ["SAC"],
    "San Antonio Spurs": ["SAS", "SA"],
    "Toronto Raptors": ["TOR"],
    "Utah Jazz": ["UTA"],
    "Washington Wizards": ["WAS", "WSH"],
}

_NFL_TEAM_CODES: Dict[str, Iterable[str]] = {
    "Arizona Cardinals": ["ARI"],
    "Atlanta Falcons": ["ATL"],
    "Baltimore Ravens": ["BAL"],
    "Buffalo Bills": ["BUF"],
    "Carolina Panthers": ["CAR"],
    "Chicago Bears": ["CHI"],
    "Cincinnati Bengals": ["CIN"],
    "Cleveland Browns": ["CLE"],
    "Dallas Cowboys": ["DAL"],
    "Denver Broncos": ["DEN"],
    "Detroit Lions": ["DET"],
    "Green Bay Packers": ["GB", "GNB"],
    "Houston Texans": ["HOU"],
    "Indianapolis Colts": ["IND"],
    "Jacksonville Jaguars": ["JAX", "JAC"],
    "Kansas City Chiefs": ["KC", "KAN"],
    "Las Vegas Raiders": ["LV", "LVR"],
    "Los Angeles Chargers": ["LAC"],
    "Los Angeles Rams": ["LAR"],
    "Miami Dolphins": ["MIA"],
    "Minnesota Vikings": ["MIN"],
    "New England Patriots": ["NE", "NWE"],
    "New Orleans Saints": ["NO", "NOR"],
    "New York Giants": ["NYG"],
    "New York Jets": ["NYJ"],
    "Philadelphia Eagles": ["PHI"],
    "Pittsburgh Steelers": ["PIT"],
    "San Francisco 49ers": ["SF", "SFO"],
    "Seattle Seahawks": ["SEA"],
    "Tampa Bay Buccaneers": ["TB", "TAM"],
    "Tennessee Titans": ["TEN"],
    "Washington Commanders": ["WAS", "WSH"],
}

_MLB_TEAM_CODES: Dict[str, Iterable[str]] = {
    "Arizona Diamondbacks": ["ARI", "AZ"],
    "Athletics": ["ATH", "OAK"],
    "Atlanta Braves": ["ATL"],
    "Baltimore Orioles": ["BAL"],
    "Boston Red Sox": ["BOS"],
    "Chicago Cubs": ["CHC"],
    "Chicago White Sox": ["CWS", "CHW"],
    "Cincinnati Reds": ["CIN"],
    "Cleveland Guardians": ["CLE"],
    "Colorado Rockies": ["COL"],
    "Detroit Tigers": ["DET"],
    "Houston Astros": ["HOU"],
    "Kansas City Royals": ["KC", "KCR"],
    "Los Angeles Angels": ["LAA"],
    "Los Angeles Dodgers": ["LAD"],
    "Miami Marlins": ["MIA"],
    "Milwaukee Brewers": ["MIL"],
    "Minnesota Twins": ["MIN"],
    "New York Mets": ["NYM"],
    "New York Yankees": ["NYY"],
    "Philadelphia Phillies": ["PHI"],
    "Pittsburgh Pirates": ["PIT"],
    "San Diego Padres": ["SD", "SDP"],
    "San Francisco Giants": ["SF", "SFG"],
    "Seattle Mariners": ["SEA"],
    "St. Louis Cardinals": ["STL"],
    "Tampa Bay Rays": ["TB", "TBR"],
    "Texas Rangers": ["TEX"],
    "Toronto Blue Jays": ["TOR"],
    "Washington Nationals": ["WSH", "WSN"],
}


_TEAM_CODE_MAPS: Dict[str, Dict[str, str]] = {
    NHL_LEAGUE_ID: _build_code_map(_NHL_TEAM_CODES),
    EPL_LEAGUE_ID: _build_code_map(_EPL_TEAM_CODES),
    NBA_LEAGUE_ID: _build_code_map(_NBA_TEAM_CODES),
    NFL_LEAGUE_ID: _build_code_map(_NFL_TEAM_CODES),
    MLB_LEAGUE_ID: _build_code_map(_MLB_TEAM_CODES),
}


def get_team_code_map(league_id: Optional[str]) -> Dict[str, str]:
    if not league_id:
        return {}
    return _TEAM_CODE_MAPS.get(league_id, {})


def has_team_code_map(league_id: Optional[str]) -> bool:
    return bool(league_id) and league_id in _TEAM_CODE_MAPS


def lookup_team_code(code: str, league_id: Optional[str] = None) -> Optional[str]:
    """Expand a team code to the full team name.

    With a league that has a code table, only that table is consulted. Without
    a league, a code is expanded only when every table that knows it agrees.
    """
    key = code.strip().upper()
    if not key:
        return None
    if league_id:
        return get_team_code_map(league_id).get(key)
    expansions = {mapping[key] for mapping in _TEAM_CODE_MAPS.values() if key in mapping}
    if len(expansions) == 1:
        return expansions.pop()
    return None
