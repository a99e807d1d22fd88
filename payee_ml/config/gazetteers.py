"""Word lists for rule-based payee classification.

Entries are written in display form; the rule gate normalizes them with the
same function it applies to payee names, so "S.A." matches "S A" and
"MÜLLER" matches "MULLER".
"""

# Legal-entity designators, by jurisdiction
LEGAL_SUFFIXES: tuple[str, ...] = (
    # US / UK / Commonwealth
    "LLC", "L.L.C.", "INC", "INCORPORATED", "CORP", "CORPORATION", "CO",
    "COMPANY", "LTD", "LIMITED", "LP", "LLP", "PC", "PLLC", "PLC", "PTY",
    "PTE", "LLLP",
    # Continental Europe
    "GMBH", "AG", "KG", "OHG", "E.V.", "SA", "S.A.", "SAS", "SARL", "SL",
    "SRL", "S.R.L.", "SPA", "S.P.A.", "BV", "B.V.", "NV", "N.V.", "OY", "AB",
    "A/S", "APS", "LDA", "LTDA",
    # Eastern Europe / Turkey
    "OOO", "ZAO", "ООО", "ЗАО", "A.Ş.", "SP Z O O",
)

# Legal-entity designators written without spaces (matched as substrings)
CJK_LEGAL_SUFFIXES: tuple[str, ...] = (
    "有限公司",
    "股份有限公司",
    "株式会社",
    "有限会社",
    "주식회사",
    "บริษัท",
)

BUSINESS_KEYWORDS: tuple[str, ...] = (
    "SERVICES", "SERVICE", "SOLUTIONS", "CONSULTING", "CONSULTANTS",
    "MANAGEMENT", "SYSTEMS", "TECHNOLOGIES", "TECHNOLOGY", "ENTERPRISES",
    "GROUP", "HOLDINGS", "PARTNERS", "ASSOCIATES", "AGENCY", "INTERNATIONAL",
    "WORLDWIDE", "GLOBAL", "INDUSTRIES", "CONSTRUCTION", "MANUFACTURING",
    "ENGINEERING", "LOGISTICS", "TRANSPORT", "TRUCKING", "MEDICAL", "DENTAL",
    "HEALTHCARE", "PHARMACY", "PHARMA", "LABORATORIES", "FINANCIAL",
    "INSURANCE", "BANK", "BANCORP", "CAPITAL", "INVESTMENTS", "REALTY",
    "PROPERTIES", "RESTAURANT", "CAFE", "HOTEL", "MOTEL", "SHOP", "STORE",
    "STORES", "MARKET", "SUPERMARKET", "OUTLET", "MALL", "RETAIL", "WHOLESALE",
    "SUPPLY", "SUPPLIES", "FOODS", "BRANDS", "NETWORK", "NETWORKS", "STUDIO",
    "STUDIOS", "MEDIA", "COMMUNICATIONS", "TELECOM", "ELECTRIC", "PLUMBING",
    "ROOFING", "LANDSCAPING", "CLEANING", "SECURITY", "ALARM", "AUTOMOTIVE",
    "MOTORS", "INSTITUTE", "FOUNDATION", "ASSOCIATION", "FEDERATION",
    "SOCIETY", "CLUB", "CHURCH", "MINISTRIES", "HOSPITAL", "CLINIC", "CENTER",
    "CENTRE", "UNIVERSITY", "COLLEGE", "SCHOOL", "ACADEMY", "TRUST",
    "THEATER", "THEATRE", "GALLERY", "MUSEUM", "UTILITIES", "WATER", "GAS",
    "ENERGY", "POWER",
)

# Public-sector phrases; matched as whole-token phrases
GOVERNMENT_PHRASES: tuple[str, ...] = (
    "CITY OF", "COUNTY OF", "STATE OF", "TOWN OF", "VILLAGE OF",
    "TOWNSHIP OF", "DEPARTMENT OF", "DEPT OF", "OFFICE OF", "BUREAU OF",
    "BOARD OF", "DIVISION OF", "MINISTRY OF", "GOVERNMENT OF", "REPUBLIC OF",
    "UNIVERSITY OF", "COLLEGE OF", "UNITED STATES", "US TREASURY",
    "INTERNAL REVENUE SERVICE", "SCHOOL DISTRICT", "PUBLIC SCHOOLS",
    "TAX COLLECTOR", "HER MAJESTY", "HIS MAJESTY", "COMMONWEALTH OF",
    "AUTHORITY", "COMMISSION", "MUNICIPAL", "FEDERAL",
)

# Titles that precede a personal name
HONORIFIC_TITLES: tuple[str, ...] = (
    "MR", "MRS", "MS", "MISS", "MX", "DR", "DOCTOR", "PROF", "PROFESSOR",
    "REV", "REVEREND", "PASTOR", "RABBI", "FATHER", "SISTER", "HON", "JUDGE",
    "SIR", "DAME", "LADY", "LORD", "HERR", "FRAU", "SENOR", "SENORA",
    "SENORITA", "MONSIEUR", "MADAME", "MME", "MLLE", "SIGNOR", "SIGNORA",
    "DONA",
)

# Professional post-nominals that follow a personal name
POST_NOMINALS: tuple[str, ...] = (
    "MD", "PHD", "DDS", "DMD", "DVM", "JD", "ESQ", "CPA", "RN", "NP",
    "PA C", "LCSW", "MBA", "CFA", "CFP",
)

GENERATIONAL_SUFFIXES: tuple[str, ...] = ("JR", "SR", "II", "III", "IV", "V")

FIRST_NAMES: frozenset[str] = frozenset(
    {
        # English
        "JAMES", "JOHN", "ROBERT", "MICHAEL", "WILLIAM", "DAVID", "RICHARD",
        "JOSEPH", "THOMAS", "CHARLES", "CHRISTOPHER", "DANIEL", "MATTHEW",
        "ANTHONY", "MARK", "DONALD", "STEVEN", "PAUL", "ANDREW", "JOSHUA",
        "KENNETH", "KEVIN", "BRIAN", "GEORGE", "TIMOTHY", "RONALD", "JASON",
        "EDWARD", "JEFFREY", "RYAN", "JACOB", "GARY", "NICHOLAS", "ERIC",
        "JONATHAN", "STEPHEN", "LARRY", "JUSTIN", "SCOTT", "BRANDON",
        "BENJAMIN", "SAMUEL", "GREGORY", "ALEXANDER", "PATRICK", "FRANK",
        "RAYMOND", "JACK", "DENNIS", "JERRY", "TOM", "MIKE", "BOB", "JIM",
        "BILL", "STEVE", "DAVE", "CHRIS", "MATT", "JEFF", "RICK", "RON", "RAY",
        "MARY", "PATRICIA", "LINDA", "BARBARA", "ELIZABETH", "JENNIFER",
        "MARIA", "SUSAN", "MARGARET", "DOROTHY", "LISA", "NANCY", "KAREN",
        "BETTY", "HELEN", "SANDRA", "DONNA", "CAROL", "RUTH", "SHARON",
        "MICHELLE", "LAURA", "SARAH", "KIMBERLY", "DEBORAH", "JESSICA",
        "SHIRLEY", "CYNTHIA", "ANGELA", "MELISSA", "BRENDA", "AMY", "ANNA",
        "REBECCA", "VIRGINIA", "KATHLEEN", "PAMELA", "MARTHA", "AMANDA",
        "STEPHANIE", "CAROLYN", "CHRISTINE", "JANET", "CATHERINE", "FRANCES",
        "ANN", "JOYCE", "DIANE", "SUE", "JANE", "JOAN", "LYNN", "KATE", "EMILY",
        "EMMA", "OLIVIA", "SOPHIA",
        # Spanish / Portuguese
        "JOSE", "JUAN", "FRANCISCO", "ANTONIO", "MANUEL", "PEDRO", "LUIS",
        "JORGE", "MIGUEL", "CARLOS", "DIEGO", "RICARDO", "FERNANDO",
        "ALEJANDRO", "SERGIO", "RAFAEL", "JOAO", "ANA", "CARMEN", "JOSEFA",
        "ISABEL", "DOLORES", "PILAR", "TERESA", "ROSA", "CRISTINA", "LUCIA",
        # French
        "JEAN", "PIERRE", "MICHEL", "JACQUES", "ANDRE", "PHILIPPE", "RENE",
        "LOUIS", "ALAIN", "BERNARD", "MARIE", "JEANNE", "FRANCOISE", "MONIQUE",
        "NICOLE", "JACQUELINE", "ANNE", "SYLVIE", "SUZANNE",
        # German
        "HANS", "PETER", "KLAUS", "WOLFGANG", "JURGEN", "GUNTHER", "DIETER",
        "HORST", "URSULA", "HELGA", "RENATE", "MONIKA", "KARIN", "INGRID",
        "ERIKA", "ELISABETH",
        # Chinese (romanized)
        "WEI", "LEI", "MIN", "HONG", "XIAO", "LAN", "YONG", "JUN", "CHAO",
        "HUI", "PING", "MING", "HUA", "JIAN", "JING",
        # Japanese (romanized)
        "TARO", "AKIRA", "TAKASHI", "YUKI", "NAOKI", "HIROSHI", "KENJI",
        "TAKUMI", "YOKO", "YUMI", "NAOMI", "AKIKO", "HANAKO", "AYUMI",
        # Indian
        "AMIT", "RAHUL", "VIJAY", "SANJAY", "RAJESH", "SUNIL", "ANIL", "AJAY",
        "SURESH", "RAMESH", "NEHA", "ANJALI", "POOJA", "PRIYA", "SUNITA",
        "ANITA", "REKHA", "MEENA", "GEETA",
        # Arabic
        "MOHAMED", "MOHAMMED", "MUHAMMAD", "AHMED", "MAHMOUD", "ALI", "HASSAN",
        "HUSSEIN", "OMAR", "ABDULLAH", "KHALED", "IBRAHIM", "FATIMA", "AISHA",
        "AMINA", "LAYLA", "ZAINAB", "SALMA", "HUDA", "SAMIRA",
    }
)

LAST_NAMES: frozenset[str] = frozenset(
    {
        # English
        "SMITH", "JOHNSON", "WILLIAMS", "BROWN", "JONES", "MILLER", "DAVIS",
        "WILSON", "ANDERSON", "TAYLOR", "THOMAS", "MOORE", "MARTIN", "JACKSON",
        "THOMPSON", "WHITE", "HARRIS", "CLARK", "LEWIS", "ROBINSON", "WALKER",
        "YOUNG", "ALLEN", "KING", "WRIGHT", "SCOTT", "HILL", "GREEN", "ADAMS",
        "NELSON", "BAKER", "HALL", "CAMPBELL", "MITCHELL", "CARTER", "ROBERTS",
        "TURNER", "PHILLIPS", "PARKER", "EVANS", "EDWARDS", "COLLINS",
        "STEWART", "MORRIS", "REED", "COOK", "MORGAN", "BELL", "MURPHY",
        "BAILEY", "COOPER", "RICHARDSON", "COX", "HOWARD", "WARD", "PETERSON",
        "GRAY", "WATSON", "BROOKS", "KELLY", "SANDERS", "PRICE", "BENNETT",
        "DOE",
        # Spanish
        "GARCIA", "RODRIGUEZ", "MARTINEZ", "HERNANDEZ", "LOPEZ", "GONZALEZ",
        "FERNANDEZ", "SANCHEZ", "PEREZ", "GOMEZ", "RAMIREZ", "TORRES",
        "FLORES", "RIVERA",
        # French
        "BERNARD", "PETIT", "DURAND", "DUBOIS", "MOREAU", "LAURENT",
        # German
        "MÜLLER", "MULLER", "MUELLER", "SCHMIDT", "SCHNEIDER", "FISCHER",
        "WEBER", "MEYER", "WAGNER", "BECKER", "SCHULZ", "SCHULTZ", "HOFFMANN",
        # Vietnamese / Chinese (romanized)
        "NGUYEN", "LI", "WANG", "ZHANG", "LIU", "CHEN", "YANG", "HUANG",
        "ZHAO", "WU", "ZHOU",
        # Japanese (romanized)
        "SATO", "SUZUKI", "TAKAHASHI", "TANAKA", "WATANABE", "ITO",
        "YAMAMOTO", "NAKAMURA", "KOBAYASHI", "KATO",
        # Indian
        "SHARMA", "SINGH", "KUMAR", "RAO", "REDDY", "PATEL", "JAIN", "SHAH",
        "VERMA", "MEHTA",
        # Arabic
        "MOHAMMED", "HASSAN", "AHMED", "IBRAHIM", "KHAN",
    }
)

# Placeholder and test-data markers; a whole-word hit flags the payee name
EXCLUSION_KEYWORDS: tuple[str, ...] = (
    "TEST", "SAMPLE", "EXAMPLE", "DUMMY", "PLACEHOLDER", "TEMP", "TEMPORARY",
    "UNKNOWN", "N/A", "NA", "NULL", "UNDEFINED", "BLANK", "EMPTY", "VOID",
    "PENDING", "PROCESSING", "ERROR", "FAILED", "INVALID", "DEBUG",
)
